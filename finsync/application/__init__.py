"""Application layer: commands, handlers and services of the sync core."""
