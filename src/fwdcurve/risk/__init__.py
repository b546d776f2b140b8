"""
Risk package - finite difference curve sensitivities.
"""

from .bumping import BumpEngine

__all__ = [
    "BumpEngine",
]
