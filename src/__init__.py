"""policylens: checks a webpage against a policy document with an LLM."""

from policylens.version import __version__

__all__ = ["__version__"]
