"""Dead man's switch: a check-in timer that escalates from a warning to a final notice."""

__version__ = "0.1.0"
