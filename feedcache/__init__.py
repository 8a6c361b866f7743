"""Background-refreshed feed cache with a sanitizing token renderer."""

__version__ = "1.1.0"
