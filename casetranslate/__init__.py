"""Language detection and translation annotations for review case items."""

__version__ = "0.1.0"
