"""
ChromiQ Palette Module

Capacity-bounded, deduplicated palettes and the per-user session workflow
that edits them from image coordinates.
"""

from .controller import ColorSource, PaletteController, PaletteEntry, PaletteResult, PaletteStatus
from .session import PaletteSession

__all__ = [
    'ColorSource',
    'PaletteController',
    'PaletteEntry',
    'PaletteResult',
    'PaletteStatus',
    'PaletteSession',
]
