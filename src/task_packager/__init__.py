"""Build sealed, content-addressed task packages for remote execution."""

__version__ = "0.1.0"
