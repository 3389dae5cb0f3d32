"""Core services: structured errors and stderr logging."""
