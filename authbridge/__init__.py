"""External authentication bridge for command-line auth providers."""

__version__ = "0.1.0"
