import unittest

from tonal_karaoke.core.errors import InvalidInputError
from tonal_karaoke.note_utils import (
    LETTER_ROWS,
    letter_name,
    letter_row,
    parse_note_name,
    step_to_frequency,
    step_to_name,
)


class TestScientificPitchNotation(unittest.TestCase):
    def test_middle_c(self):
        # Middle C (C4) is MIDI 60
        self.assertEqual(step_to_name(60), "C4")

    def test_a4(self):
        self.assertEqual(step_to_name(69), "A4")

    def test_octave_transitions(self):
        # Test octave transitions (B3 -> C4)
        self.assertEqual(step_to_name(59), "B3")
        self.assertEqual(step_to_name(60), "C4")

    def test_sharps(self):
        self.assertEqual(step_to_name(61), "C#4")
        self.assertEqual(step_to_name(63), "D#4")
        self.assertEqual(step_to_name(70), "A#4")

        # E and B never become Fb or Cb
        self.assertEqual(step_to_name(64), "E4")
        self.assertEqual(step_to_name(71), "B4")

    def test_range_ends(self):
        self.assertEqual(step_to_name(36), "C2")
        self.assertEqual(step_to_name(81), "A5")


class TestSteps(unittest.TestCase):
    def test_step_frequency(self):
        self.assertAlmostEqual(step_to_frequency(69), 440.0)
        self.assertAlmostEqual(step_to_frequency(57), 220.0)
        self.assertAlmostEqual(step_to_frequency(36), 65.406, places=3)

    def test_parse_note_name(self):
        self.assertEqual(parse_note_name("C2"), 36)
        self.assertEqual(parse_note_name("A5"), 81)
        self.assertEqual(parse_note_name("f#3"), 54)
        self.assertEqual(parse_note_name("Bb3"), 58)
        self.assertEqual(parse_note_name("Cb4"), 59)
        self.assertEqual(parse_note_name("C-1"), 0)

    def test_parse_bad_names(self):
        for name in ("", "H2", "C#", "Eb", "Cx4", "4C"):
            with self.assertRaises(InvalidInputError):
                parse_note_name(name)


class TestLetterRows(unittest.TestCase):
    def test_rows(self):
        self.assertEqual(letter_row(60), 0)  # C
        self.assertEqual(letter_row(61), 1)  # C#
        self.assertEqual(letter_row(62), 3)  # D
        self.assertEqual(letter_row(71), 16)  # B

    def test_every_pitch_class_has_a_row(self):
        rows = [letter_row(pitch) for pitch in range(12)]
        self.assertEqual(rows, sorted(rows))
        self.assertEqual(rows[0], 0)
        self.assertEqual(rows[-1], len(LETTER_ROWS) - 1)

    def test_flat_rows_stay_empty(self):
        rows = {letter_row(pitch) for pitch in range(12)}
        flat_rows = {i for i, name in enumerate(LETTER_ROWS) if name.endswith("b")}
        self.assertFalse(rows & flat_rows)

    def test_rows_ignore_octave(self):
        for pitch in range(12):
            self.assertEqual(letter_row(pitch), letter_row(pitch + 48))
            self.assertEqual(letter_row(pitch), letter_row(pitch - 24))

    def test_letter_name(self):
        self.assertEqual(letter_name(66), "F#")
        self.assertEqual(letter_name(-2), "A#")


if __name__ == "__main__":
    unittest.main()
