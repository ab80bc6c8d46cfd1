"""Contact extraction engine for production call sheets."""

__version__ = "0.1.0"
