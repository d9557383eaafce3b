"""IRC bot that expands and manages GitHub issue references."""

__version__ = "0.3.0"
