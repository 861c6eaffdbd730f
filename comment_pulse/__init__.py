"""Comment Pulse: sentiment and keyword analysis for batches of free-text comments."""

__version__ = "1.0.0"
