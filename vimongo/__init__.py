"""vimongo - A terminal UI for MongoDB."""

__version__ = "0.4.0"
