import textwrap


def wrap_lines(text: str, width: int) -> list[str]:
    """Lines of ``text`` as displayed in a pane ``width`` cells wide.

    Tabs count as a single space. Whitespace is preserved and an empty
    source line still takes one display line.
    """
    lines: list[str] = []
    for source_line in text.replace("\t", " ").splitlines():
        wrapped = textwrap.wrap(
            source_line,
            width,
            replace_whitespace=False,
            drop_whitespace=False,
        )
        lines.extend(wrapped or [""])
    return lines


class ViewportScroller:
    def __init__(self) -> None:
        self._offset = 0
        self._max_offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def max_offset(self) -> int:
        return self._max_offset

    def recompute_bounds(self, wrapped_line_count: int, visible_height: int) -> None:
        if visible_height < 1:
            raise ValueError(f"visible_height must be at least 1, got {visible_height}")

        pages, remainder = divmod(wrapped_line_count, visible_height)
        # Scrolling stops once the last full page is in view.
        self._max_offset = visible_height * max(pages - 1, 0) + (remainder if pages > 0 else 0)
        self._offset = min(self._offset, self._max_offset)

    def scroll_up(self) -> None:
        if self._offset > 0:
            self._offset -= 1

    def scroll_down(self) -> None:
        if self._offset < self._max_offset:
            self._offset += 1

    def reset(self) -> None:
        self._offset = 0
