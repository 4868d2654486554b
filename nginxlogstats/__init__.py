"""Per-path statistics and e-mailed Markdown reports for nginx access logs."""

__version__ = "0.1.0"