"""pytzline: compare wall-clock time across cities on a shared timeline."""

__version__ = "0.1.0"
