"""Definition file loading."""
