"""stickermind: LINE sticker idea generator and catalog."""

__version__ = "0.1.0"
