"""Game engine package."""
