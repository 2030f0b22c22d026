"""Blog Stage: authorization and content lifecycle service for a blogging app."""

__version__ = "0.1.0"
