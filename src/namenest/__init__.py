"""NameNest: validated baby name suggestions from LLM completions."""

__version__ = "0.1.0"
