"""Compiles visualization objects into execution configurations."""
