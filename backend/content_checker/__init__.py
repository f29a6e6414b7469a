"""Content Checker: compare approved copy with live page text and score it."""

__version__ = "1.0.0"
