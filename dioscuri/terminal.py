"""Terminal input and drawing.

The application only sees the ``Terminal`` and ``Frame`` protocols;
``CursesTerminal`` is the implementation used at runtime.
"""
import curses
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol


class Key(Enum):
    CHAR = "char"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ENTER = "enter"
    BACKSPACE = "backspace"
    ESC = "esc"
    OTHER = "other"


@dataclass(frozen=True)
class KeyEvent:
    key: Key
    char: str = ""


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


@dataclass(frozen=True)
class MouseEvent:
    pass


Event = KeyEvent | ResizeEvent | MouseEvent


class Style(Enum):
    NORMAL = "normal"
    ACCENT = "accent"
    TITLE = "title"
    BOLD = "bold"
    ERROR = "error"


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def inner(self) -> "Rect":
        return Rect(self.x + 1, self.y + 1, max(self.width - 2, 0), max(self.height - 2, 0))


class Frame(Protocol):
    @property
    def width(self) -> int:
        ...

    @property
    def height(self) -> int:
        ...

    def put(self, x: int, y: int, text: str, style: Style = Style.NORMAL) -> None:
        ...

    def set_cursor(self, x: int, y: int) -> None:
        ...


class Terminal(Protocol):
    def poll_event(self, timeout: float) -> Event | None:
        """Wait up to ``timeout`` seconds for the next event."""
        ...

    def render(self, draw: Callable[[Frame], None]) -> None:
        ...


def cell_width(text: str) -> int:
    """Number of terminal cells ``text`` occupies.

    Wide and fullwidth East Asian characters take two cells, combining
    marks take none.
    """
    width = 0
    for char in text:
        if unicodedata.combining(char):
            continue
        width += 2 if unicodedata.east_asian_width(char) in ("W", "F") else 1
    return width


def clip_to_width(text: str, width: int) -> str:
    """Longest prefix of ``text`` that fits in ``width`` cells."""
    used = 0
    for index, char in enumerate(text):
        used += cell_width(char)
        if used > width:
            return text[:index]
    return text


def draw_box(
    frame: Frame,
    area: Rect,
    title: str = "",
    footer: str = "",
    style: Style = Style.NORMAL,
    title_style: Style = Style.TITLE,
    footer_style: Style = Style.BOLD,
) -> None:
    """Border around ``area``, title on the top edge, footer right-aligned on the bottom edge."""
    if area.width < 2 or area.height < 2:
        return

    span = area.width - 2
    bottom = area.y + area.height - 1
    frame.put(area.x, area.y, "┌" + "─" * span + "┐", style)
    for row in range(area.y + 1, bottom):
        frame.put(area.x, row, "│", style)
        frame.put(area.x + area.width - 1, row, "│", style)
    frame.put(area.x, bottom, "└" + "─" * span + "┘", style)

    if title:
        frame.put(area.x + 1, area.y, title[:span], title_style)
    if footer:
        footer = footer[:span]
        frame.put(area.x + area.width - 1 - len(footer), bottom, footer, footer_style)


class CursesFrame(Frame):
    def __init__(self, window: "curses.window", palette: dict[Style, int]) -> None:
        self._window = window
        self._palette = palette
        self._height, self._width = window.getmaxyx()
        self.cursor: tuple[int, int] | None = None

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def put(self, x: int, y: int, text: str, style: Style = Style.NORMAL) -> None:
        if not 0 <= y < self._height or not 0 <= x < self._width:
            return
        try:
            self._window.addstr(y, x, text[:self._width - x], self._palette[style])
        except curses.error:
            # Writing the bottom-right cell moves the cursor off screen and
            # reports an error after the text has been drawn.
            pass

    def set_cursor(self, x: int, y: int) -> None:
        self.cursor = (min(max(x, 0), self._width - 1), min(max(y, 0), self._height - 1))


_SPECIAL_KEYS = {
    curses.KEY_UP: Key.UP,
    curses.KEY_DOWN: Key.DOWN,
    curses.KEY_LEFT: Key.LEFT,
    curses.KEY_RIGHT: Key.RIGHT,
    curses.KEY_ENTER: Key.ENTER,
    curses.KEY_BACKSPACE: Key.BACKSPACE,
}


class CursesTerminal(Terminal):
    ESC_DELAY_MS = 25

    def __init__(self, window: "curses.window") -> None:
        self._window = window
        self._window.keypad(True)
        curses.set_escdelay(self.ESC_DELAY_MS)
        self._palette = _init_palette()

    def poll_event(self, timeout: float) -> Event | None:
        self._window.timeout(max(int(timeout * 1000), 0))
        try:
            pressed = self._window.get_wch()
        except curses.error:
            return None
        return self._translate(pressed)

    def render(self, draw: Callable[[Frame], None]) -> None:
        self._window.erase()
        frame = CursesFrame(self._window, self._palette)
        draw(frame)
        _set_cursor_visibility(frame.cursor is not None)
        if frame.cursor is not None:
            x, y = frame.cursor
            self._window.move(y, x)
        self._window.refresh()

    def _translate(self, pressed: int | str) -> Event:
        if isinstance(pressed, str):
            if pressed == "\x1b":
                return KeyEvent(Key.ESC)
            if pressed in ("\n", "\r"):
                return KeyEvent(Key.ENTER)
            if pressed in ("\x7f", "\b"):
                return KeyEvent(Key.BACKSPACE)
            if pressed.isprintable():
                return KeyEvent(Key.CHAR, pressed)
            return KeyEvent(Key.OTHER)

        if pressed == curses.KEY_RESIZE:
            curses.update_lines_cols()
            height, width = self._window.getmaxyx()
            return ResizeEvent(width, height)
        if pressed == curses.KEY_MOUSE:
            return MouseEvent()
        return KeyEvent(_SPECIAL_KEYS.get(pressed, Key.OTHER))


def _init_palette() -> dict[Style, int]:
    palette = {
        Style.NORMAL: curses.A_NORMAL,
        Style.ACCENT: curses.A_NORMAL,
        Style.TITLE: curses.A_BOLD,
        Style.BOLD: curses.A_BOLD,
        Style.ERROR: curses.A_BOLD | curses.A_REVERSE,
    }
    if not curses.has_colors():
        return palette

    try:
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(1, curses.COLOR_BLUE, -1)
        curses.init_pair(2, curses.COLOR_RED, -1)
    except curses.error:
        return palette

    palette[Style.ACCENT] = curses.color_pair(1)
    palette[Style.TITLE] = curses.color_pair(1) | curses.A_BOLD
    palette[Style.ERROR] = curses.color_pair(2) | curses.A_BOLD
    return palette


def _set_cursor_visibility(visible: bool) -> None:
    try:
        curses.curs_set(1 if visible else 0)
    except curses.error:
        pass
