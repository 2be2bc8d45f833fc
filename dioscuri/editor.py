class InputEditor:
    """A single editable line with a cursor.

    The cursor counts characters, not bytes, and always satisfies
    ``0 <= cursor <= len(text)``.
    """

    def __init__(self, text: str = "") -> None:
        self._text = text
        self._cursor = len(text)

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    def insert_char(self, char: str) -> None:
        if len(char) != 1:
            raise ValueError(f"Expected a single character, got {char!r}")
        self._text = self._text[:self._cursor] + char + self._text[self._cursor:]
        self.move_right()

    def delete_before_cursor(self) -> None:
        if self._cursor == 0:
            return
        self._text = self._text[:self._cursor - 1] + self._text[self._cursor:]
        self.move_left()

    def move_left(self) -> None:
        self._cursor = self._clamp(self._cursor - 1)

    def move_right(self) -> None:
        self._cursor = self._clamp(self._cursor + 1)

    def reset_to_end(self) -> None:
        self._cursor = len(self._text)

    def _clamp(self, position: int) -> int:
        return min(max(position, 0), len(self._text))
