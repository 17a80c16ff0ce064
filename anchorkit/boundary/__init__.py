"""Boundary adapters: persistence and the live document."""
