"""diagcollect: host diagnostic collector with streaming secret redaction."""

__version__ = "0.4.0"
