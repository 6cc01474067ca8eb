"""Monthly attendance summary from time-clock spreadsheets."""

__version__ = "0.1.0"
