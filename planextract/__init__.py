"""Floor plan extraction: walls, rooms, scale and room names from raster plans."""

__version__ = "1.0.0"
