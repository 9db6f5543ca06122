import unittest

from tonal_karaoke.core.errors import NoTimedNotesError
from tonal_karaoke.highlight import END_OF_LINE_EPSILON, end_of_line_beat, highlight, highlight_note
from tonal_karaoke.note_types import HighlightPhase, HighlightState, Line, Note


def hello_line():
    return Line(
        [
            Note.regular(0, 4, 60, "Hel"),
            Note.regular(4, 4, 62, "lo"),
        ]
    )


class TestHighlightNote(unittest.TestCase):
    def setUp(self):
        self.note = Note.regular(8, 4, 60, "la")

    def test_upcoming(self):
        self.assertEqual(highlight_note(self.note, 7.99), HighlightState.upcoming())

    def test_active_at_start(self):
        self.assertEqual(highlight_note(self.note, 8), HighlightState.active(0.0))

    def test_active_at_end(self):
        self.assertEqual(highlight_note(self.note, 12), HighlightState.active(1.0))

    def test_played_after_end(self):
        self.assertEqual(highlight_note(self.note, 12 + 1e-6), HighlightState.played())

    def test_progress(self):
        state = highlight_note(self.note, 9)
        self.assertIs(state.phase, HighlightPhase.ACTIVE)
        self.assertAlmostEqual(state.progress, 0.25)

    def test_zero_duration(self):
        note = Note.golden(5, 0, 60, "!")
        self.assertEqual(highlight_note(note, 4), HighlightState.upcoming())
        for beat in (5, 5.5, 100):
            self.assertEqual(highlight_note(note, beat), HighlightState.active(1.0))


class TestHighlightLine(unittest.TestCase):
    def test_middle_of_first_note(self):
        states = highlight(hello_line(), 2)
        self.assertEqual(states[0][1], HighlightState.active(0.5))
        self.assertEqual(states[1][1], HighlightState.upcoming())

    def test_after_line(self):
        states = highlight(hello_line(), 10)
        self.assertEqual(
            [state.phase for _, state in states],
            [HighlightPhase.PLAYED, HighlightPhase.PLAYED],
        )

    def test_idempotent(self):
        line = hello_line()
        for beat in (-1, 0, 3.3, 4, 7.9, 8, 20):
            self.assertEqual(highlight(line, beat), highlight(line, beat))

    def test_replay_at_earlier_beat(self):
        line = hello_line()
        highlight(line, 10)
        self.assertEqual(highlight(line, 2)[0][1], HighlightState.active(0.5))

    def test_player_change_is_skipped(self):
        line = Line(
            [
                Note.player_change(2),
                Note.freestyle(0, 2, 0, "oh"),
                Note.player_change(1),
                Note.golden(2, 2, 64, "yeah"),
            ]
        )
        states = highlight(line, 1)
        self.assertEqual([note.text for note, _ in states], ["oh", "yeah"])

    def test_no_timed_notes(self):
        with self.assertRaises(NoTimedNotesError):
            highlight(Line([Note.player_change(1)]), 0)
        with self.assertRaises(NoTimedNotesError):
            highlight(Line([]), 0)

    def test_end_of_line_plays_every_note(self):
        line = hello_line()
        self.assertEqual(end_of_line_beat(line), 8 + END_OF_LINE_EPSILON)
        for _, state in highlight(line, end_of_line_beat(line)):
            self.assertEqual(state, HighlightState.played())


if __name__ == "__main__":
    unittest.main()
