"""ChromiQ services: imaging, color analysis, palettes, observability."""
