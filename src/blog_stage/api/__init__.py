# src/blog_stage/api/__init__.py
"""HTTP API for the Blog Stage application."""
