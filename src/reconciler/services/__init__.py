from .identify import IdentifyService

__all__ = ["IdentifyService"]
