"""
Serving — FastAPI application for the chat pipeline.

This module exposes ``POST /chat`` and a liveness probe so the pipeline
can run as a standalone container.
"""
