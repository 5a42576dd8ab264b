"""podplay - play a podcast feed from the terminal."""

__version__ = "0.1.0"
