"""Static rule data for finsync services."""
