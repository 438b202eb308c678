from vibe.projects.registry import ProjectRegistry

__all__ = ["ProjectRegistry"]
