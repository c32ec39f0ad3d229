"""flowcanvas: lay out and inspect declarative prompt flows."""

__version__ = "0.1.0"
