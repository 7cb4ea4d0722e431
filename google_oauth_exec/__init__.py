"""Command-line validator for Google-issued ID tokens."""

__version__ = "0.1.0"
