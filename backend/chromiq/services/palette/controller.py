"""
Palette Controller

Ordered, capacity-bounded collection of chosen colors. Every entry is at
least PALETTE_SIMILARITY_THRESHOLD Delta-E away from every other entry.

Business outcomes (palette full, similar color present, bad index) are
returned as PaletteResult values rather than raised, so callers always
see the status of an operation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from loguru import logger

from chromiq.config import config
from chromiq.services.colors.conversion import delta_e_cie76
from chromiq.services.colors.models import ColorSample, DominantColor


class ColorSource(str, Enum):
    """Where a palette color came from."""
    DERIVED_FROM_IMAGE = "derived_from_image"
    USER_PICKED_EXACT = "user_picked_exact"
    USER_PICKED_REGION = "user_picked_region"

    @classmethod
    def for_pick(cls, exact: bool) -> "ColorSource":
        return cls.USER_PICKED_EXACT if exact else cls.USER_PICKED_REGION

    @property
    def is_user_picked(self) -> bool:
        return self is not ColorSource.DERIVED_FROM_IMAGE


class PaletteStatus(str, Enum):
    """Outcome of a palette operation."""
    SUCCESS = "success"
    INVALID_INPUT = "invalid_input"
    OUT_OF_RANGE = "out_of_range"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    DUPLICATE_REJECTED = "duplicate_rejected"


@dataclass(frozen=True)
class PaletteEntry:
    """A palette color with its provenance."""
    color: ColorSample
    source: ColorSource
    original_percentage: float = 0.0
    original_pixel_count: int = 0

    @property
    def is_user_picked(self) -> bool:
        return self.source.is_user_picked

    @property
    def source_description(self) -> str:
        if self.source is ColorSource.DERIVED_FROM_IMAGE:
            return f"Dominant ({self.original_percentage:.1f}%)"
        if self.source is ColorSource.USER_PICKED_EXACT:
            return "User Pick (Exact)"
        return "User Pick (Region)"

    def __str__(self) -> str:
        return f"PaletteEntry{{{self.color.hex} - {self.source_description}}}"


@dataclass(frozen=True)
class PaletteResult:
    """
    Outcome of add, remove or replace.

    `entry` is the entry added or the replacement; `previous` is the entry
    removed or replaced. On DUPLICATE_REJECTED, `blocking` and
    `blocking_index` identify the existing entry that was too similar.
    """
    status: PaletteStatus
    message: str
    entry: Optional[PaletteEntry] = None
    previous: Optional[PaletteEntry] = None
    blocking: Optional[PaletteEntry] = None
    blocking_index: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.status is PaletteStatus.SUCCESS

    def __bool__(self) -> bool:
        return self.success


def _pick_mode(source: ColorSource) -> str:
    return "exact pixel" if source is ColorSource.USER_PICKED_EXACT else "region average"


class PaletteController:
    """
    Palette state for one logical session.

    Entries are only changed through add, remove and replace; the views
    hand out copies of the entry list.
    """

    def __init__(self, image_name: Optional[str] = None,
                 max_size: int = None,
                 similarity_threshold: float = None):
        self.max_size = max_size if max_size is not None else config.MAX_PALETTE_SIZE
        self.similarity_threshold = (similarity_threshold if similarity_threshold is not None
                                     else config.PALETTE_SIMILARITY_THRESHOLD)
        self.image_name = image_name if image_name is not None else "Custom Palette"
        self._entries: List[PaletteEntry] = []

    @classmethod
    def from_dominant_colors(cls, dominant_colors: Sequence[DominantColor],
                             image_name: Optional[str] = None,
                             **kwargs) -> "PaletteController":
        """
        Build an image palette from extracted dominant colors.

        Colors go through the same capacity and similarity rules as add;
        rejected ones are skipped and logged.
        """
        palette = cls(image_name=image_name if image_name is not None else "Unnamed Image", **kwargs)
        for dominant in dominant_colors:
            result = palette.add(
                dominant.color,
                ColorSource.DERIVED_FROM_IMAGE,
                original_percentage=dominant.percentage,
                original_pixel_count=dominant.pixel_count,
            )
            if not result.success:
                logger.info(f"Skipped dominant color {dominant.color.hex}: {result.message}")

        logger.info(f"Palette initialized with {palette.size} dominant colors")
        return palette

    # --- Views ---

    @property
    def entries(self) -> List[PaletteEntry]:
        return list(self._entries)

    @property
    def colors(self) -> List[ColorSample]:
        return [entry.color for entry in self._entries]

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def is_full(self) -> bool:
        return len(self._entries) >= self.max_size

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> PaletteEntry:
        return self._entries[index]

    def summary(self) -> str:
        if not self._entries:
            return "Empty palette"
        dominant = sum(1 for e in self._entries if e.source is ColorSource.DERIVED_FROM_IMAGE)
        picked = sum(1 for e in self._entries if e.is_user_picked)
        return (f"Palette: {self.size}/{self.max_size} colors "
                f"({dominant} dominant, {picked} user-picked)")

    # --- Similarity ---

    def find_similar(self, color: ColorSample, exclude_index: Optional[int] = None) -> Optional[int]:
        """Index of the first entry within the similarity threshold of color, if any."""
        for index, entry in enumerate(self._entries):
            if index == exclude_index:
                continue
            if delta_e_cie76(color.lab, entry.color.lab) <= self.similarity_threshold:
                return index
        return None

    def _invalid_index(self, index: int) -> PaletteResult:
        return PaletteResult(
            PaletteStatus.OUT_OF_RANGE,
            f"Invalid index {index}. Valid range: 0-{len(self._entries) - 1}",
        )

    def _duplicate(self, blocking_index: int) -> PaletteResult:
        blocking = self._entries[blocking_index]
        return PaletteResult(
            PaletteStatus.DUPLICATE_REJECTED,
            f"Similar color already exists: {blocking.color.hex} ({blocking.source_description})",
            blocking=blocking,
            blocking_index=blocking_index,
        )

    # --- Operations ---

    def add(self, color: ColorSample,
            source: ColorSource = ColorSource.USER_PICKED_REGION,
            original_percentage: float = 0.0,
            original_pixel_count: int = 0) -> PaletteResult:
        """Append a color unless the palette is full or a similar color exists."""
        if color is None:
            return PaletteResult(PaletteStatus.INVALID_INPUT, "Cannot add null color to palette")

        if self.is_full:
            return PaletteResult(
                PaletteStatus.CAPACITY_EXCEEDED,
                f"Palette is full ({self.max_size} colors). Remove a color first.",
            )

        similar = self.find_similar(color)
        if similar is not None:
            return self._duplicate(similar)

        entry = PaletteEntry(color, source, original_percentage, original_pixel_count)
        self._entries.append(entry)

        if source.is_user_picked:
            logger.info(f"Added user-picked color {color.hex} ({_pick_mode(source)}) to palette")
            message = f"Added {color.hex} to palette ({_pick_mode(source)} mode)"
        else:
            logger.debug(f"Added dominant color {color.hex} to palette")
            message = f"Added {color.hex} to palette"
        return PaletteResult(PaletteStatus.SUCCESS, message, entry=entry)

    def remove(self, index: int) -> PaletteResult:
        """Remove and return the entry at index."""
        if index is None or not 0 <= index < len(self._entries):
            return self._invalid_index(index)

        removed = self._entries.pop(index)
        logger.info(f"Removed color {removed.color.hex} from palette (was at index {index})")
        return PaletteResult(
            PaletteStatus.SUCCESS,
            f"Removed {removed.color.hex} from palette",
            previous=removed,
        )

    def replace(self, index: int, color: ColorSample,
                source: ColorSource = ColorSource.USER_PICKED_REGION) -> PaletteResult:
        """Swap the entry at index, checking similarity against all other entries."""
        if index is None or not 0 <= index < len(self._entries):
            return self._invalid_index(index)
        if color is None:
            return PaletteResult(PaletteStatus.INVALID_INPUT, "Cannot replace with null color")

        similar = self.find_similar(color, exclude_index=index)
        if similar is not None:
            return self._duplicate(similar)

        old = self._entries[index]
        new = PaletteEntry(color, source)
        self._entries[index] = new

        logger.info(f"Replaced color {old.color.hex} with {color.hex} at index {index} "
                    f"({_pick_mode(source)} mode)")
        return PaletteResult(
            PaletteStatus.SUCCESS,
            f"Replaced {old.color.hex} with {color.hex}",
            entry=new,
            previous=old,
        )

    def clear(self) -> None:
        self._entries.clear()
