import unittest
from unittest import mock

from tonal_karaoke.layout import STATUS_ROW, Frame, RenderSegment, SegmentKind, layout_status
from tonal_karaoke.note_types import EstimatedNote
from tonal_karaoke.ui import CursesRenderer


class FakeScreen:
    def __init__(self, height=50, width=40):
        self.size = (height, width)
        self.drawn = []
        self.cells = {}
        self.refreshed = 0
        self.erased = 0

    def getmaxyx(self):
        return self.size

    def addstr(self, row, col, text, attributes):
        self.drawn.append((row, col, text))
        for offset, char in enumerate(text):
            self.cells[(row, col + offset)] = char

    def row_text(self, row):
        return "".join(self.cells.get((row, col), " ") for col in range(self.size[1]))

    def refresh(self):
        self.refreshed += 1

    def erase(self):
        self.erased += 1


class TestCursesRenderer(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch("tonal_karaoke.ui.curses.has_colors", return_value=False)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.screen = FakeScreen()
        self.renderer = CursesRenderer()
        self.renderer.screen = self.screen

    def test_render_draws_and_refreshes(self):
        frame = Frame(
            (
                RenderSegment(0, 0, "####", SegmentKind.PROGRESS),
                RenderSegment(10, 46, "la", SegmentKind.LYRIC),
            )
        )
        self.renderer.render(frame)
        self.assertEqual(self.screen.drawn, [(0, 0, "####"), (46, 10, "la")])
        self.assertEqual(self.screen.refreshed, 1)

    def test_render_clips_to_window(self):
        frame = Frame(
            (
                RenderSegment(35, 2, "##########", SegmentKind.NOTE_BAR),
                RenderSegment(0, 60, "below", SegmentKind.STATUS),
                RenderSegment(45, 2, "right", SegmentKind.NOTE_LABEL),
                RenderSegment(0, 3, "", SegmentKind.MARKED_BAR),
            )
        )
        self.renderer.render(frame)
        self.assertEqual(self.screen.drawn, [(2, 35, "#####")])

    def test_shorter_note_name_replaces_longer_one(self):
        self.screen = FakeScreen(height=STATUS_ROW + 1, width=80)
        self.renderer.screen = self.screen
        for sample in (EstimatedNote(61, "C#4", 277.18), EstimatedNote(60, "C4", 261.63)):
            self.renderer.render(Frame(tuple(layout_status(sample, 80))))
        self.assertEqual(self.screen.row_text(STATUS_ROW).strip(), "C4")

        self.renderer.render(Frame(tuple(layout_status(None, 80))))
        self.assertEqual(self.screen.row_text(STATUS_ROW).strip(), "")

    def test_clear(self):
        self.renderer.clear()
        self.assertEqual(self.screen.erased, 1)

    def test_terminal_width(self):
        self.assertEqual(self.renderer.terminal_width(), 40)

    def test_without_screen(self):
        renderer = CursesRenderer()
        renderer.render(Frame())
        renderer.clear()
        self.assertEqual(renderer.terminal_width(), 80)


if __name__ == "__main__":
    unittest.main()
