"""Ports and shared runtime objects (clock, application state)."""
