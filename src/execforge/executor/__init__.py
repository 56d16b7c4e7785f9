"""Execution clients."""
