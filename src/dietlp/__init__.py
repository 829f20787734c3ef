"""Cost-minimizing resource allocation as linear programs."""

__version__ = "0.1.0"
