"""PostGate: human-in-the-loop approval gateway for workflow automation."""

__version__ = "0.1.0"
