"""Retrieval-augmented chat for a women's-health assistant."""

__version__ = "0.1.0"
