"""Linux operating-system labs that inspect and exercise the running kernel."""

__version__ = "0.1.0"