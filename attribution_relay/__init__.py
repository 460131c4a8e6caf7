"""Branch → Amplitude attribution relay."""

__version__ = "0.1.0"
