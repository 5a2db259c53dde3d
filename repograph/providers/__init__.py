"""Concrete implementations of the interfaces in ``repograph.interfaces``."""
