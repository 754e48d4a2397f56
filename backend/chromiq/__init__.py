"""
ChromiQ color analysis and palette engine.

Turns a decoded pixel buffer into a small set of perceptually meaningful
colors and lets a user curate that set interactively.
"""

__version__ = "0.4.0"
