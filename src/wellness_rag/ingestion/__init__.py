"""
Ingestion — scraping, chunking, and embedding source pages into the vector store.

This module is the offline half of the system: it converts a fixed list
of expert articles into one stored record per text chunk.
"""
