# src/api/models.py — v1
"""HTTP request/response schemas."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ComplianceRequest(BaseModel):
    """Optional JSON body for POST /compliance (query params take precedence)."""

    model_config = ConfigDict(populate_by_name=True)

    policy: str = ""
    webpage: str = Field(default="", validation_alias=AliasChoices("webpage", "target"))


class ComplianceResponse(BaseModel):
    """Findings joined by single spaces. Field name is part of the wire format."""

    model_config = ConfigDict(populate_by_name=True)

    response: str = Field(serialization_alias="Response", validation_alias="Response")


class ErrorResponse(BaseModel):
    detail: str


class HealthResponse(BaseModel):
    status: str = "ok"
