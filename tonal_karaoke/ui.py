import curses
from typing import Dict, Tuple

from .core.interfaces import IRenderSink
from .layout import ColorClass, Frame, RenderSegment, SegmentKind
from .logger import get_logger

# Get logger for this module
logger = get_logger(__name__)

# curses has no separate bright colours; bright is colour + 8 on 16-colour
# terminals and falls back to A_BOLD elsewhere.
_BRIGHT = 8

# (foreground, background, bright foreground, bright background)
Style = Tuple[int, int, bool, bool]

BAR_STYLES: Dict[ColorClass, Style] = {
    ColorClass.UPCOMING_REGULAR: (curses.COLOR_BLUE, -1, True, False),
    ColorClass.ACTIVE_REGULAR: (curses.COLOR_BLUE, -1, True, False),
    ColorClass.PLAYED_REGULAR: (curses.COLOR_WHITE, -1, False, False),
    ColorClass.UPCOMING_GOLDEN: (curses.COLOR_YELLOW, -1, False, False),
    ColorClass.ACTIVE_GOLDEN: (curses.COLOR_YELLOW, -1, False, False),
    ColorClass.PLAYED_GOLDEN: (curses.COLOR_YELLOW, -1, True, False),
    ColorClass.UPCOMING_FREESTYLE: (curses.COLOR_RED, -1, False, False),
    ColorClass.ACTIVE_FREESTYLE: (curses.COLOR_RED, -1, False, False),
    ColorClass.PLAYED_FREESTYLE: (curses.COLOR_RED, -1, True, False),
}

# Lyrics only tell golden notes apart; freestyle looks like regular
LYRIC_STYLES: Dict[ColorClass, Style] = {
    ColorClass.UPCOMING_REGULAR: (curses.COLOR_BLUE, -1, True, False),
    ColorClass.ACTIVE_REGULAR: (curses.COLOR_BLACK, curses.COLOR_WHITE, False, True),
    ColorClass.PLAYED_REGULAR: (curses.COLOR_WHITE, -1, False, False),
    ColorClass.UPCOMING_GOLDEN: (curses.COLOR_YELLOW, -1, True, False),
    ColorClass.ACTIVE_GOLDEN: (curses.COLOR_BLACK, curses.COLOR_YELLOW, False, True),
    ColorClass.PLAYED_GOLDEN: (curses.COLOR_YELLOW, -1, False, False),
    ColorClass.UPCOMING_FREESTYLE: (curses.COLOR_BLUE, -1, True, False),
    ColorClass.ACTIVE_FREESTYLE: (curses.COLOR_BLACK, curses.COLOR_WHITE, False, True),
    ColorClass.PLAYED_FREESTYLE: (curses.COLOR_WHITE, -1, False, False),
}

class CursesRenderer(IRenderSink):
    """Curses-based render sink for lyric frames"""

    def __init__(self):
        """Initialize the curses renderer"""
        self.screen = None
        self._pairs: Dict[Tuple[int, int], int] = {}
        self._bold_fallback = False

    def init_screen(self):
        """Initialize curses and the colour pairs"""
        self.screen = curses.initscr()
        try:
            curses.noecho()
            curses.cbreak()
            curses.curs_set(0)
            self.screen.keypad(True)
            if curses.has_colors():
                curses.start_color()
                curses.use_default_colors()
                self._bold_fallback = curses.COLORS < 16
            self.screen.clear()
            logger.info("Curses renderer initialized")
            return self.screen
        except curses.error as e:
            logger.error(f"Failed to initialize curses: {e}")
            self.cleanup()
            raise

    def _attributes(self, segment: RenderSegment) -> int:
        if segment.color is None or not curses.has_colors():
            return curses.A_NORMAL
        styles = LYRIC_STYLES if segment.kind is SegmentKind.LYRIC else BAR_STYLES
        style = styles[segment.color]
        fg, bg, bright_fg, bright_bg = style
        attributes = curses.A_NORMAL
        if self._bold_fallback:
            if bright_fg:
                attributes |= curses.A_BOLD
        else:
            fg = fg + _BRIGHT if bright_fg else fg
            bg = bg + _BRIGHT if bright_bg and bg >= 0 else bg

        key = (fg, bg)
        if key not in self._pairs:
            pair_number = len(self._pairs) + 1
            curses.init_pair(pair_number, fg, bg)
            self._pairs[key] = pair_number
        return attributes | curses.color_pair(self._pairs[key])

    def render(self, frame: Frame) -> None:
        """Draw the frame's segments, clipped to the window"""
        if not self.screen:
            return
        height, width = self.screen.getmaxyx()
        for segment in frame.segments:
            if not segment.text or not (0 <= segment.row < height) or segment.col >= width:
                continue
            text = segment.text[: width - segment.col]
            try:
                self.screen.addstr(segment.row, segment.col, text, self._attributes(segment))
            except curses.error:
                # Writing the bottom-right cell raises after drawing it
                pass
        self.screen.refresh()

    def clear(self) -> None:
        if self.screen:
            self.screen.erase()
            self.screen.refresh()

    def terminal_width(self) -> int:
        if not self.screen:
            return 80
        _, width = self.screen.getmaxyx()
        return width

    def cleanup(self):
        if self.screen:
            self.screen.keypad(False)
            curses.nocbreak()
            curses.echo()
            curses.endwin()
            self.screen = None
