from vibe.tui.renderers import VibeConsoleUI

__all__ = ["VibeConsoleUI"]
