"""Adapters binding the identity domain to concrete infrastructure."""
