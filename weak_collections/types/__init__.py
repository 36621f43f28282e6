from .missing import MISSING

__all__ = ("MISSING",)
