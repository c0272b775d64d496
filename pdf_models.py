from __future__ import annotations

import math
import unicodedata
from dataclasses import dataclass, field
from itertools import groupby
from typing import Any, Iterable

FLOAT_EPSILON = 0.01
LINE_VARIANCE = 0.1

_LTR_CLASSES = frozenset({"L", "LRE", "LRO"})
_RTL_CLASSES = frozenset({"R", "AL", "RLE", "RLO"})


def feq(a: float, b: float, epsilon: float = FLOAT_EPSILON) -> bool:
    return abs(a - b) < epsilon


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned box; y grows downward."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"negative extent: width={self.width}, height={self.height}")

    @classmethod
    def from_bounds(cls, left: float, top: float, right: float, bottom: float) -> Rectangle:
        return cls(left, top, right - left, bottom - top)

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def overlap_ratio(self, other: Rectangle) -> float:
        """Fraction of this rectangle's area covered by *other*."""
        if self.area <= 0:
            return 0.0
        w = max(0.0, min(self.right, other.right) - max(self.left, other.left))
        h = max(0.0, min(self.bottom, other.bottom) - max(self.top, other.top))
        return (w * h) / self.area

    def vertical_overlap(self, top: float, bottom: float) -> float:
        return max(0.0, min(self.bottom, bottom) - max(self.top, top))

    def vertically_overlaps(self, top: float, bottom: float, tolerance: float = 0.0) -> bool:
        """Return True if [top, bottom] overlaps this box's vertical span.

        With the default tolerance the overlap must have positive length;
        a positive tolerance also accepts touching spans and gaps narrower
        than the tolerance.
        """
        return min(self.bottom, bottom) - max(self.top, top) > -tolerance

    def union(self, other: Rectangle) -> Rectangle:
        return Rectangle.from_bounds(
            min(self.left, other.left),
            min(self.top, other.top),
            max(self.right, other.right),
            max(self.bottom, other.bottom),
        )


@dataclass(eq=False)
class Font:
    """Opaque font handle. Two handles are the same font only if they are the same object."""

    name: str

    def __repr__(self) -> str:
        return f"Font({self.name!r})"


def _float_key(v: float) -> Any:
    return "nan" if math.isnan(v) else v


def _text_directionality(text: str) -> int:
    ltr = rtl = 0
    for ch in text:
        cls = unicodedata.bidirectional(ch)
        if cls in _LTR_CLASSES:
            ltr += 1
        elif cls in _RTL_CLASSES:
            rtl += 1
    if ltr == rtl:
        return 0
    return 1 if ltr > rtl else -1


@dataclass(frozen=True, eq=False)
class Glyph:
    """One positioned unit of text, usually a single character.

    ``font`` is compared by identity. ``width_of_space`` may be NaN or 0 when
    the extraction stage could not determine it. ``direction`` is positive for
    left-to-right, negative for right-to-left and 0 when the text itself
    decides.
    """

    bbox: Rectangle
    text: str
    font: Any = None
    font_size: float = 0.0
    width_of_space: float = math.nan
    direction: float = 0.0

    @classmethod
    def at(
        cls,
        x: float,
        y: float,
        width: float,
        height: float,
        text: str,
        font: Any = None,
        font_size: float = 0.0,
        width_of_space: float = math.nan,
        direction: float = 0.0,
    ) -> Glyph:
        return cls(Rectangle(x, y, width, height), text, font, font_size, width_of_space, direction)

    @property
    def x(self) -> float:
        return self.bbox.x

    @property
    def y(self) -> float:
        return self.bbox.y

    @property
    def width(self) -> float:
        return self.bbox.width

    @property
    def height(self) -> float:
        return self.bbox.height

    @property
    def left(self) -> float:
        return self.bbox.left

    @property
    def top(self) -> float:
        return self.bbox.top

    @property
    def right(self) -> float:
        return self.bbox.right

    @property
    def bottom(self) -> float:
        return self.bbox.bottom

    @property
    def directionality(self) -> int:
        """1 for left-to-right, -1 for right-to-left, 0 for neutral."""
        if self.direction > 0:
            return 1
        if self.direction < 0:
            return -1
        return _text_directionality(self.text)

    def overlap_ratio(self, other: Glyph) -> float:
        return self.bbox.overlap_ratio(other.bbox)

    def _key(self) -> tuple:
        return (
            self.bbox,
            self.text,
            id(self.font),
            _float_key(self.font_size),
            _float_key(self.width_of_space),
            _float_key(self.direction),
        )

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Glyph):
            return NotImplemented
        return self.font is other.font and self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"Glyph(x={self.x:g}, y={self.y:g}, w={self.width:g}, h={self.height:g}, "
            f"text={self.text!r})"
        )


class InvalidRulingError(ValueError):
    pass


@dataclass(frozen=True)
class Ruling:
    """A vertical line segment at x = *position* spanning [top, bottom]."""

    position: float
    top: float
    bottom: float

    def __post_init__(self) -> None:
        for name in ("position", "top", "bottom"):
            if not math.isfinite(getattr(self, name)):
                raise InvalidRulingError(f"ruling {name} must be finite, got {getattr(self, name)!r}")
        if self.top > self.bottom:
            raise InvalidRulingError(
                f"ruling at x={self.position} has inverted extent: top={self.top} > bottom={self.bottom}"
            )

    @property
    def y1(self) -> float:
        return self.top

    @property
    def y2(self) -> float:
        return self.bottom


@dataclass
class TextRun:
    """Glyphs that belong to one word or line fragment, in reading order."""

    glyphs: list[Glyph]
    bbox: Rectangle = field(init=False)
    _ltr_dominant: bool | None = field(init=False, default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.glyphs:
            raise ValueError("a TextRun needs at least one glyph")
        self.glyphs = list(self.glyphs)
        self.bbox = union_bbox(self.glyphs)

    @classmethod
    def of(cls, *glyphs: Glyph) -> TextRun:
        return cls(list(glyphs))

    def append(self, glyph: Glyph) -> None:
        self.glyphs.append(glyph)
        self.bbox = self.bbox.union(glyph.bbox)
        self._ltr_dominant = None

    def __len__(self) -> int:
        return len(self.glyphs)

    def __iter__(self):
        return iter(self.glyphs)

    @property
    def text(self) -> str:
        return "".join(g.text for g in self.glyphs)

    @property
    def left(self) -> float:
        return self.bbox.left

    @property
    def top(self) -> float:
        return self.bbox.top

    @property
    def right(self) -> float:
        return self.bbox.right

    @property
    def bottom(self) -> float:
        return self.bbox.bottom

    @property
    def width(self) -> float:
        return self.bbox.width

    @property
    def height(self) -> float:
        return self.bbox.height

    @property
    def ltr_dominant(self) -> bool:
        """True unless right-to-left characters outnumber left-to-right ones."""
        if self._ltr_dominant is None:
            ltr = rtl = 0
            for g in self.glyphs:
                d = g.directionality
                if d > 0:
                    ltr += len(g.text)
                elif d < 0:
                    rtl += len(g.text)
            self._ltr_dominant = ltr >= rtl
        return self._ltr_dominant

    def split_by_direction(self, ltr_dominant: bool | None = None) -> list[TextRun]:
        """Split into consecutive runs that agree with the dominant direction.

        Neutral glyphs side with the dominant direction. Always returns new
        TextRun objects; glyph order is preserved and nothing is dropped.
        """
        if ltr_dominant is None:
            ltr_dominant = self.ltr_dominant
        dominant = 1 if ltr_dominant else -1

        def is_dominant(g: Glyph) -> bool:
            d = g.directionality
            return d == 0 or d == dominant

        return [TextRun(list(group)) for _, group in groupby(self.glyphs, key=is_dominant)]


def union_bbox(glyphs: Iterable[Glyph]) -> Rectangle:
    glyphs = list(glyphs)
    if not glyphs:
        raise ValueError("cannot take the union of zero glyphs")
    box = glyphs[0].bbox
    for g in glyphs[1:]:
        box = box.union(g.bbox)
    return box
