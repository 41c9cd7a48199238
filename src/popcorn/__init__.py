"""Popcorn: scripted demo runs and autonomous exploration of live pages."""

__version__ = "0.1.0"
