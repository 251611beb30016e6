"""finsync - transaction synchronization and conflict resolution core."""

__version__ = "0.1.0"
