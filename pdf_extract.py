from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

from pdf_config import MergeConfig
from pdf_models import Glyph, Ruling, TextRun, feq

logger = logging.getLogger(__name__)


@dataclass
class _LineState:
    """Running accumulators for one merge_words pass."""

    average_char_width: float | None
    end_of_last_x: float | None
    max_bottom: float
    max_height: float
    min_top: float
    last_word_spacing: float | None = None

    @classmethod
    def start(cls, first: Glyph) -> _LineState:
        # The seed glyph's full width stands in for the first average.
        return cls(
            average_char_width=first.width,
            end_of_last_x=first.right,
            max_bottom=first.bottom,
            max_height=first.height,
            min_top=first.top,
        )

    def reset_line(self) -> None:
        self.end_of_last_x = None
        self.max_bottom = -math.inf
        self.max_height = -1.0
        self.min_top = math.inf

    def extend_line(self, glyph: Glyph) -> None:
        self.max_bottom = max(self.max_bottom, glyph.bottom)
        self.max_height = max(self.max_height, glyph.height)
        self.min_top = min(self.min_top, glyph.top)

    def on_line(self, glyph: Glyph, variance: float) -> bool:
        return glyph.bbox.vertically_overlaps(self.max_bottom - self.max_height, self.max_bottom, variance)


def _is_known_spacing(value: float) -> bool:
    return not math.isnan(value) and value != 0


def _crossed_ruling(prev: Glyph, glyph: Glyph, rulings: list[Ruling]) -> Ruling | None:
    """Return the first ruling standing between *prev* and *glyph* on their shared rows."""
    for r in rulings:
        if not (prev.bbox.vertically_overlaps(r.top, r.bottom) and glyph.bbox.vertically_overlaps(r.top, r.bottom)):
            continue
        if prev.x < r.position < glyph.x or glyph.x < r.position < prev.x:
            return r
    return None


def width_of_word(glyphs: list[Glyph], start: int) -> float:
    """Width from glyphs[start] to the last glyph before the next space or newline.

    Without a break the word runs to the end of *glyphs*.
    """
    end = glyphs[-1].right
    for i in range(start, len(glyphs)):
        text = glyphs[i].text
        if " " in text or "\n" in text:
            end = glyphs[i - 1].right if i > 0 else glyphs[i].right
            break
    return abs(glyphs[start].left - end)


def closest_ruling_distance(glyphs: list[Glyph], index: int, rulings: list[Ruling]) -> float:
    """Distance from glyphs[index]'s right edge to the nearest ruling on its right.

    Only applies when the following glyph starts lower on the page, and only
    to rulings whose extent brackets the glyph's bottom edge. Returns inf when
    nothing qualifies.
    """
    if index + 1 >= len(glyphs):
        return math.inf
    glyph = glyphs[index]
    if not glyph.y < glyphs[index + 1].y:
        return math.inf

    distance = math.inf
    for r in rulings:
        if not (r.top < glyph.bottom < r.bottom):
            continue
        to_right = abs(glyph.right - r.position)
        to_left = abs(glyph.left - r.position)
        if to_right > to_left:
            continue
        distance = min(distance, to_right)
    return distance


def merge_words(
    glyphs: Iterable[Glyph],
    rulings: Iterable[Ruling] | None = None,
    config: MergeConfig | None = None,
) -> list[TextRun]:
    """Group positioned glyphs into word/line runs.

    Single forward pass over the glyphs in the order given, inserting
    synthetic space glyphs where the horizontal gap looks like a word break
    and never joining two glyphs across a vertical ruling. Each resulting run
    is then split so that no run mixes dominant and non-dominant writing
    directions. The caller's sequence is copied, never modified.
    """
    config = config or MergeConfig()
    config.validate()

    chars = list(glyphs)
    verticals = list(rulings or ())
    if not chars:
        return []

    runs: list[TextRun] = [TextRun([chars[0]])]
    state = _LineState.start(chars[0])
    prev_index = 0
    dropped = 0

    for index in range(1, len(chars)):
        glyph = chars[index]
        current = runs[-1]
        prev = current.glyphs[-1]

        # Double-struck bold renders the same character twice in place.
        if glyph.text == prev.text and prev.overlap_ratio(glyph) > config.duplicate_overlap_ratio:
            logger.debug("dropping duplicate %r at index %d", glyph.text, index)
            dropped += 1
            continue

        if (
            glyph.text == " "
            and feq(prev.left, glyph.left, config.float_epsilon)
            and feq(prev.top, glyph.top, config.float_epsilon)
        ):
            dropped += 1
            continue

        if glyph.font is not prev.font or not feq(glyph.font_size, prev.font_size, config.float_epsilon):
            state.average_char_width = None

        crossed = _crossed_ruling(prev, glyph, verticals)
        if crossed is not None:
            logger.debug(
                "glyph %r at index %d is across the ruling at x=%g", glyph.text, index, crossed.position
            )

        word_spacing = glyph.width_of_space
        if not _is_known_spacing(word_spacing):
            delta_space = math.inf
        elif state.last_word_spacing is None:
            delta_space = word_spacing * config.space_tolerance
        else:
            delta_space = ((word_spacing + state.last_word_spacing) / 2.0) * config.space_tolerance

        # Deliberately not a true cumulative mean: the pairwise average
        # favours recent characters.
        char_width = glyph.width / len(glyph.text) if glyph.text else None
        if char_width is None:
            average_char_width = None
        elif state.average_char_width is None:
            average_char_width = char_width
        else:
            average_char_width = (state.average_char_width + char_width) / 2.0
        if average_char_width is None:
            delta_char = math.inf
        else:
            delta_char = average_char_width * config.average_char_tolerance

        if state.end_of_last_x is None:
            expected_next_x = -math.inf
        else:
            expected_next_x = state.end_of_last_x + min(delta_char, delta_space)

        same_line = True
        if not state.on_line(glyph, config.line_variance):
            # A word narrower than the room left before the next ruling would
            # have fit on the previous line, so this is a real line break
            # rather than a wrap inside a ruled cell.
            room = closest_ruling_distance(chars, prev_index, verticals)
            if math.isinf(room) or width_of_word(chars, index) < room:
                state.reset_line()
                expected_next_x = -math.inf
                same_line = False

        state.end_of_last_x = glyph.right

        space: Glyph | None = None
        if (
            crossed is None
            and same_line
            and expected_next_x < glyph.left
            and not prev.text.endswith(" ")
        ):
            space = Glyph.at(
                prev.left,
                prev.top,
                max(0.0, expected_next_x - prev.left),
                prev.height,
                " ",
                font=prev.font,
                font_size=prev.font_size,
                width_of_space=prev.width_of_space,
            )
            current.append(space)

        state.extend_line(glyph)

        if same_line and crossed is None:
            current.append(glyph)
        else:
            runs.append(TextRun([glyph]))
        prev_index = index

        state.last_word_spacing = word_spacing if _is_known_spacing(word_spacing) else None
        if space is None:
            state.average_char_width = average_char_width
        elif average_char_width is None:
            state.average_char_width = space.width
        else:
            state.average_char_width = (average_char_width + space.width) / 2.0

    result = [part for run in runs for part in run.split_by_direction()]
    logger.debug(
        "merged %d glyphs into %d runs (%d dropped, %d rulings)",
        len(chars),
        len(result),
        dropped,
        len(verticals),
    )
    return result
