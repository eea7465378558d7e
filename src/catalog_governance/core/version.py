"""Version information for the catalog governance engine."""

__version__ = "1.0.0"
