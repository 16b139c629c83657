"""WTF Dial: shared dials whose value tracks the average of their members."""

__version__ = "0.1.0"
