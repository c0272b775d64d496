from __future__ import annotations

from dataclasses import dataclass

from pdf_models import FLOAT_EPSILON, LINE_VARIANCE

DUPLICATE_OVERLAP_RATIO = 0.5
SPACE_TOLERANCE = 0.5
AVERAGE_CHAR_TOLERANCE = 0.3


@dataclass(frozen=True)
class MergeConfig:
    """Thresholds used by merge_words.

    The defaults were tuned against real documents; the character-width
    tolerance in particular works together with the two-term running average
    and should not be changed on its own.
    """

    duplicate_overlap_ratio: float = DUPLICATE_OVERLAP_RATIO
    space_tolerance: float = SPACE_TOLERANCE
    average_char_tolerance: float = AVERAGE_CHAR_TOLERANCE
    float_epsilon: float = FLOAT_EPSILON
    line_variance: float = LINE_VARIANCE

    def validate(self) -> None:
        if not (0.0 <= self.duplicate_overlap_ratio <= 1.0):
            raise ValueError("duplicate_overlap_ratio must be within [0, 1]")
        if self.space_tolerance <= 0:
            raise ValueError("space_tolerance must be > 0")
        if self.average_char_tolerance <= 0:
            raise ValueError("average_char_tolerance must be > 0")
        if self.float_epsilon <= 0:
            raise ValueError("float_epsilon must be > 0")
        if self.line_variance < 0:
            raise ValueError("line_variance must be >= 0")
