"""Terminal user interface for podplay."""

from podplay.tui.app import PodplayApp

__all__ = ["PodplayApp"]
