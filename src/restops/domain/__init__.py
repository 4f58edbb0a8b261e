"""Domain layer for restops application."""
