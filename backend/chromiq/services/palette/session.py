"""
Palette session workflow.

One PaletteSession holds the current image and palette for one logical
user: load an image to get its dominant-color palette, then curate it by
picking colors at image coordinates. Sessions share no state.
"""

from typing import Optional, Union

import numpy as np

from chromiq.config import config
from chromiq.errors import InvalidInputError
from chromiq.services.colors.dominant import extract_dominant_colors
from chromiq.services.colors.models import ColorSample
from chromiq.services.colors.regional import pick_exact_pixel, pick_region_color
from chromiq.services.imaging import PixelBuffer, as_pixel_buffer
from chromiq.utils.ids import extract_timestamp_from_session_id, generate_session_id
from chromiq.utils.logging import get_logger
from .controller import ColorSource, PaletteController, PaletteResult


class PaletteSession:
    """Image plus palette for one user, with coordinate-driven editing."""

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or generate_session_id()
        self.image: Optional[PixelBuffer] = None
        self.palette: Optional[PaletteController] = None
        self._log = get_logger().bind(session_id=self.session_id)
        self._log.debug("Palette session started", extra={"started_at": self.started_at})

    @property
    def started_at(self) -> str:
        """Creation timestamp (YYYYmmddHHMMSS) for generated ids, empty otherwise."""
        return extract_timestamp_from_session_id(self.session_id)

    @property
    def has_active_session(self) -> bool:
        return self.palette is not None

    def _require_image(self) -> PixelBuffer:
        if self.image is None:
            raise InvalidInputError("No image loaded. Please upload an image first.")
        return self.image

    def _require_palette(self) -> PaletteController:
        if self.palette is None:
            raise InvalidInputError("No active palette. Please upload an image first.")
        return self.palette

    def load_image(self, image: Union[PixelBuffer, np.ndarray],
                   name: Optional[str] = None,
                   max_colors: int = None) -> PaletteController:
        """
        Replace the session image and build a palette from its dominant colors.

        Args:
            image: PixelBuffer or (H, W, 3/4) array
            name: Image name shown with the palette
            max_colors: Number of dominant colors to extract

        Returns:
            The new palette
        """
        if max_colors is None:
            max_colors = config.DEFAULT_MAX_COLORS
        buffer = as_pixel_buffer(image)

        dominant = extract_dominant_colors(buffer, max_colors)
        palette = PaletteController.from_dominant_colors(dominant, image_name=name)

        self.image = buffer
        self.palette = palette
        self._log.info("Palette generated", extra={
            "image": palette.image_name,
            "width": buffer.width,
            "height": buffer.height,
            "palette_size": palette.size,
        })
        return palette

    def pick_color(self, x: int, y: int, exact: bool = False,
                   region_size: int = None) -> ColorSample:
        """Color at (x, y) of the session image, exact or region averaged."""
        image = self._require_image()
        if exact:
            return pick_exact_pixel(image, x, y)
        return pick_region_color(image, x, y, region_size)

    def add_color_at(self, x: int, y: int, exact: bool = False,
                     region_size: int = None) -> PaletteResult:
        """Pick a color at (x, y) and append it to the palette."""
        palette = self._require_palette()
        color = self.pick_color(x, y, exact, region_size)
        result = palette.add(color, ColorSource.for_pick(exact))
        self._log.info("Add color", extra={"x": x, "y": y, "status": result.status.value})
        return result

    def replace_color_at(self, index: int, x: int, y: int, exact: bool = False,
                         region_size: int = None) -> PaletteResult:
        """Pick a color at (x, y) and put it in place of the entry at index."""
        palette = self._require_palette()
        color = self.pick_color(x, y, exact, region_size)
        result = palette.replace(index, color, ColorSource.for_pick(exact))
        self._log.info("Replace color", extra={"index": index, "status": result.status.value})
        return result

    def remove_color(self, index: int) -> PaletteResult:
        palette = self._require_palette()
        result = palette.remove(index)
        self._log.info("Remove color", extra={"index": index, "status": result.status.value})
        return result

    def reset(self) -> None:
        """Drop the image and palette."""
        self.image = None
        self.palette = None
        self._log.info("Session reset")
