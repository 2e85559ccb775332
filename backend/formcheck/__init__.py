"""Real-time exercise form analysis: rep counting and per-rep form feedback."""

__version__ = "1.0.0"
