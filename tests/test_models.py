from __future__ import annotations

import math
import unittest

from pdf_models import Font, Glyph, InvalidRulingError, Rectangle, Ruling, TextRun, feq, union_bbox

FONT = Font("Helvetica")


class TestRectangle(unittest.TestCase):
    def test_edges_are_derived_from_position_and_size(self) -> None:
        r = Rectangle(2, 3, 10, 5)
        self.assertEqual((r.left, r.top, r.right, r.bottom), (2, 3, 12, 8))
        self.assertEqual(r.area, 50)
        self.assertEqual(Rectangle.from_bounds(2, 3, 12, 8), r)

    def test_negative_extent_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Rectangle(0, 0, -1, 5)
        with self.assertRaises(ValueError):
            Rectangle(0, 0, 1, -5)

    def test_overlap_ratio_is_relative_to_own_area(self) -> None:
        small = Rectangle(0, 0, 10, 10)
        big = Rectangle(5, 0, 100, 10)
        self.assertAlmostEqual(small.overlap_ratio(big), 0.5)
        self.assertAlmostEqual(big.overlap_ratio(small), 50 / 1000)
        self.assertEqual(small.overlap_ratio(Rectangle(50, 50, 1, 1)), 0.0)
        self.assertEqual(Rectangle(0, 0, 0, 10).overlap_ratio(small), 0.0)

    def test_vertical_overlap_with_and_without_tolerance(self) -> None:
        r = Rectangle(0, 0, 10, 10)
        self.assertEqual(r.vertical_overlap(5, 20), 5)
        self.assertEqual(r.vertical_overlap(10, 20), 0)
        self.assertTrue(r.vertically_overlaps(5, 20))
        self.assertFalse(r.vertically_overlaps(10, 20))
        self.assertTrue(r.vertically_overlaps(10, 20, tolerance=0.1))
        self.assertTrue(r.vertically_overlaps(10.05, 20, tolerance=0.1))
        self.assertFalse(r.vertically_overlaps(11, 20, tolerance=0.1))

    def test_union(self) -> None:
        u = Rectangle(0, 0, 10, 10).union(Rectangle(20, -5, 5, 5))
        self.assertEqual((u.left, u.top, u.right, u.bottom), (0, -5, 25, 10))

    def test_feq(self) -> None:
        self.assertTrue(feq(1.0, 1.005))
        self.assertFalse(feq(1.0, 1.02))


class TestGlyph(unittest.TestCase):
    def test_equality_uses_font_identity(self) -> None:
        a = Glyph.at(0, 0, 5, 10, "a", FONT, 12, 3)
        self.assertEqual(a, Glyph.at(0, 0, 5, 10, "a", FONT, 12, 3))
        self.assertEqual(hash(a), hash(Glyph.at(0, 0, 5, 10, "a", FONT, 12, 3)))
        self.assertNotEqual(a, Glyph.at(0, 0, 5, 10, "a", Font("Helvetica"), 12, 3))
        self.assertNotEqual(a, Glyph.at(0, 0, 5, 10, "b", FONT, 12, 3))
        self.assertNotEqual(a, Glyph.at(0, 0, 5, 10, "a", FONT, 12, 3, direction=-1))

    def test_nan_width_of_space_compares_equal(self) -> None:
        a = Glyph.at(0, 0, 5, 10, "a", FONT, 12, float("nan"))
        b = Glyph.at(0, 0, 5, 10, "a", FONT, 12, math.nan)
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))

    def test_geometry_delegates_to_bbox(self) -> None:
        g = Glyph.at(1, 2, 3, 4, "x")
        self.assertEqual((g.x, g.y, g.width, g.height), (1, 2, 3, 4))
        self.assertEqual((g.left, g.top, g.right, g.bottom), (1, 2, 4, 6))

    def test_directionality(self) -> None:
        self.assertEqual(Glyph.at(0, 0, 1, 1, "a").directionality, 1)
        self.assertEqual(Glyph.at(0, 0, 1, 1, "א").directionality, -1)
        self.assertEqual(Glyph.at(0, 0, 1, 1, "ب").directionality, -1)
        self.assertEqual(Glyph.at(0, 0, 1, 1, " ").directionality, 0)
        self.assertEqual(Glyph.at(0, 0, 1, 1, "7").directionality, 0)
        # An explicit direction wins over the text.
        self.assertEqual(Glyph.at(0, 0, 1, 1, "a", direction=-1).directionality, -1)
        self.assertEqual(Glyph.at(0, 0, 1, 1, "א", direction=1).directionality, 1)


class TestRuling(unittest.TestCase):
    def test_extent_accessors(self) -> None:
        r = Ruling(position=10, top=2, bottom=30)
        self.assertEqual((r.y1, r.y2), (2, 30))

    def test_inverted_extent_is_rejected(self) -> None:
        with self.assertRaises(InvalidRulingError):
            Ruling(position=10, top=30, bottom=2)
        with self.assertRaises(ValueError):
            Ruling(position=10, top=30, bottom=2)

    def test_non_finite_values_are_rejected(self) -> None:
        with self.assertRaises(InvalidRulingError):
            Ruling(position=math.nan, top=0, bottom=2)
        with self.assertRaises(InvalidRulingError):
            Ruling(position=1, top=0, bottom=math.inf)

    def test_zero_length_ruling_is_allowed(self) -> None:
        self.assertEqual(Ruling(position=1, top=5, bottom=5).top, 5)


class TestTextRun(unittest.TestCase):
    def test_empty_run_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            TextRun([])
        with self.assertRaises(ValueError):
            union_bbox([])

    def test_bbox_tracks_union_of_members(self) -> None:
        run = TextRun.of(Glyph.at(0, 0, 5, 10, "a"))
        run.append(Glyph.at(5, 2, 5, 12, "b"))
        run.append(Glyph.at(10, -1, 4, 3, "c"))
        self.assertEqual(run.bbox, union_bbox(run.glyphs))
        self.assertEqual((run.left, run.top, run.right, run.bottom), (0, -1, 14, 14))
        self.assertEqual((run.width, run.height), (14, 15))
        self.assertEqual(run.text, "abc")
        self.assertEqual(len(run), 3)
        self.assertEqual([g.text for g in run], ["a", "b", "c"])

    def test_constructor_copies_glyph_list(self) -> None:
        glyphs = [Glyph.at(0, 0, 5, 10, "a")]
        run = TextRun(glyphs)
        run.append(Glyph.at(5, 0, 5, 10, "b"))
        self.assertEqual(len(glyphs), 1)

    def test_ltr_dominance_counts_characters_and_ties_go_ltr(self) -> None:
        ltr = Glyph.at(0, 0, 5, 10, "ab", direction=1)
        rtl = Glyph.at(5, 0, 5, 10, "א")
        self.assertTrue(TextRun.of(ltr, rtl).ltr_dominant)
        self.assertTrue(TextRun.of(Glyph.at(0, 0, 1, 1, "a"), rtl).ltr_dominant)
        self.assertTrue(TextRun.of(Glyph.at(0, 0, 1, 1, " ")).ltr_dominant)
        self.assertFalse(TextRun.of(Glyph.at(0, 0, 1, 1, "a"), rtl, rtl).ltr_dominant)

    def test_ltr_dominance_is_recomputed_after_append(self) -> None:
        run = TextRun.of(Glyph.at(0, 0, 1, 1, "a"))
        self.assertTrue(run.ltr_dominant)
        run.append(Glyph.at(1, 0, 1, 1, "א"))
        run.append(Glyph.at(2, 0, 1, 1, "ב"))
        self.assertFalse(run.ltr_dominant)

    def test_split_by_direction_preserves_order(self) -> None:
        glyphs = [
            Glyph.at(0, 0, 5, 10, "a", direction=1),
            Glyph.at(5, 0, 5, 10, "b", direction=1),
            Glyph.at(10, 0, 5, 10, "c", direction=-1),
            Glyph.at(15, 0, 5, 10, "d", direction=1),
        ]
        parts = TextRun(glyphs).split_by_direction()
        self.assertEqual([p.text for p in parts], ["ab", "c", "d"])
        self.assertEqual([g for p in parts for g in p.glyphs], glyphs)

    def test_neutral_glyphs_side_with_dominant_direction(self) -> None:
        run = TextRun.of(
            Glyph.at(0, 0, 5, 10, "א"),
            Glyph.at(5, 0, 2, 10, " "),
            Glyph.at(7, 0, 5, 10, "ב"),
            Glyph.at(12, 0, 5, 10, "a"),
        )
        self.assertFalse(run.ltr_dominant)
        self.assertEqual([p.text for p in run.split_by_direction()], ["א ב", "a"])

    def test_homogeneous_split_returns_a_new_run(self) -> None:
        run = TextRun.of(Glyph.at(0, 0, 5, 10, "a"), Glyph.at(5, 0, 5, 10, "b"))
        parts = run.split_by_direction(True)
        self.assertEqual(len(parts), 1)
        self.assertIsNot(parts[0], run)
        self.assertEqual(parts[0].glyphs, run.glyphs)
        self.assertEqual(parts[0].bbox, run.bbox)

    def test_explicit_dominant_direction(self) -> None:
        run = TextRun.of(Glyph.at(0, 0, 5, 10, "a"), Glyph.at(5, 0, 5, 10, "b"))
        # With RTL declared dominant, the LTR glyphs are still grouped together.
        self.assertEqual([p.text for p in run.split_by_direction(False)], ["ab"])


if __name__ == "__main__":
    unittest.main()
