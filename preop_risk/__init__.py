"""Pre-operative risk assessment engine."""

__version__ = "1.0.0"
