"""Domain layer for identity resolution."""
