"""Activity Clock - track time across a fixed set of activity categories."""

__version__ = "0.1.0"
