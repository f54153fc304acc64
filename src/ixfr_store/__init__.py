"""Serial-numbered zone snapshots for incremental transfers."""

__version__ = "0.1.0"
