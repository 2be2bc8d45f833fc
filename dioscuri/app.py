import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol

from loguru import logger

from .config import DEFAULT_URL
from .editor import InputEditor
from .errors import GeminiError
from .terminal import (
    Frame,
    Key,
    KeyEvent,
    Rect,
    ResizeEvent,
    Style,
    Terminal,
    cell_width,
    clip_to_width,
    draw_box,
)
from .viewport import ViewportScroller, wrap_lines

TITLE = " dioscuri "
NORMAL_HINT = " <SLASH> - Edit the address "
EDITING_HINT = " <ENTER> - Request address | <ESC> - Focus the body "
ADDRESS_BAR_HEIGHT = 3
SCROLLBAR_THUMB = "█"


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(component="app", event=event, **kwargs).info("")


class Client(Protocol):
    def request(self, raw_url: str) -> str:
        ...


class Status(Enum):
    IDLE = "idle"
    REDRAW = "redraw"
    EXIT = "exit"


@dataclass
class NormalMode:
    """The body pane has focus; the address is read-only."""


@dataclass
class EditingMode:
    """The address bar has focus."""
    editor: InputEditor = field(default_factory=InputEditor)


Mode = NormalMode | EditingMode


class Application:
    def __init__(
        self,
        client: Client,
        terminal: Terminal,
        default_url: str = DEFAULT_URL,
        tick_rate: float = 0.3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._terminal = terminal
        self._tick_rate = tick_rate
        self._clock = clock

        self.address = default_url
        self.mode: Mode = EditingMode(InputEditor(default_url))
        self.body = ""
        self.error: str | None = None
        self.loaded = False
        self.scroller = ViewportScroller()

    def run(self) -> None:
        _log("started", address=self.address)
        last_tick = self._clock()
        self.render()

        while True:
            timeout = max(self._tick_rate - (self._clock() - last_tick), 0.0)
            status = self.handle_event(timeout)
            if status is Status.EXIT:
                break
            if status is Status.REDRAW:
                self.render()

            if self._clock() - last_tick >= self._tick_rate:
                last_tick = self._clock()

        _log("exited")

    def handle_event(self, timeout: float) -> Status:
        event = self._terminal.poll_event(timeout)
        if isinstance(event, ResizeEvent):
            return Status.REDRAW
        if not isinstance(event, KeyEvent):
            return Status.IDLE

        if isinstance(self.mode, EditingMode):
            return self._handle_editing_key(self.mode.editor, event)
        return self._handle_normal_key(event)

    def _handle_normal_key(self, event: KeyEvent) -> Status:
        if event.key is Key.UP:
            self.scroller.scroll_up()
        elif event.key is Key.DOWN:
            self.scroller.scroll_down()
        elif event.key is Key.CHAR and event.char == "/":
            self.mode = EditingMode(InputEditor(self.address))
        elif event.key is Key.ESC:
            return Status.EXIT
        else:
            return Status.IDLE
        return Status.REDRAW

    def _handle_editing_key(self, editor: InputEditor, event: KeyEvent) -> Status:
        if event.key is Key.ENTER:
            self.submit(editor)
        elif event.key is Key.CHAR:
            editor.insert_char(event.char)
        elif event.key is Key.BACKSPACE:
            editor.delete_before_cursor()
        elif event.key is Key.LEFT:
            editor.move_left()
        elif event.key is Key.RIGHT:
            editor.move_right()
        elif event.key is Key.ESC:
            # Without a body there is nothing to go back to.
            if not self.loaded:
                return Status.EXIT
            self.address = editor.text
            self.mode = NormalMode()
        else:
            return Status.IDLE
        return Status.REDRAW

    def submit(self, editor: InputEditor) -> None:
        url = editor.text
        try:
            body = self._client.request(url)
        except GeminiError as e:
            logger.warning("request for {} failed: {}", url, e)
            self.error = " ".join(str(e).split())
            return

        self.body = body
        self.address = url
        self.error = None
        self.loaded = True
        self.scroller.reset()
        editor.reset_to_end()
        self.mode = NormalMode()

    def render(self) -> None:
        self._terminal.render(self.draw)

    def draw(self, frame: Frame) -> None:
        address_height = min(ADDRESS_BAR_HEIGHT, frame.height)
        self._draw_address_bar(frame, Rect(0, 0, frame.width, address_height))
        self._draw_body(frame, Rect(0, address_height, frame.width, frame.height - address_height))

    def _draw_address_bar(self, frame: Frame, area: Rect) -> None:
        editing = isinstance(self.mode, EditingMode)
        style = Style.ACCENT if editing else Style.NORMAL
        draw_box(frame, area, title=TITLE, style=style)

        inner = area.inner
        if inner.width == 0 or inner.height == 0:
            return

        if not isinstance(self.mode, EditingMode):
            frame.put(inner.x, inner.y, clip_to_width(self.address, inner.width), style)
            return

        editor = self.mode.editor
        # Keep the cursor inside the bar by scrolling long addresses left.
        start = 0
        while cell_width(editor.text[start:editor.cursor]) >= inner.width:
            start += 1
        frame.put(inner.x, inner.y, clip_to_width(editor.text[start:], inner.width), style)
        frame.set_cursor(inner.x + cell_width(editor.text[start:editor.cursor]), inner.y)

    def _draw_body(self, frame: Frame, area: Rect) -> None:
        normal = isinstance(self.mode, NormalMode)
        inner = area.inner
        lines = wrap_lines(self.body, max(inner.width, 1))
        self.scroller.recompute_bounds(len(lines), max(inner.height, 1))

        draw_box(
            frame,
            area,
            title=f" {self.error} " if self.error else "",
            footer=NORMAL_HINT if normal else EDITING_HINT,
            style=Style.ACCENT if normal else Style.NORMAL,
            title_style=Style.ERROR,
        )

        offset = self.scroller.offset
        for row, line in enumerate(lines[offset:offset + inner.height]):
            frame.put(inner.x, inner.y + row, line)

        self._draw_scrollbar(frame, area)

    def _draw_scrollbar(self, frame: Frame, area: Rect) -> None:
        inner = area.inner
        max_offset = self.scroller.max_offset
        if max_offset == 0 or inner.height == 0:
            return

        position = round(self.scroller.offset / max_offset * (inner.height - 1))
        frame.put(area.x + area.width - 1, inner.y + position, SCROLLBAR_THUMB, Style.ACCENT)
