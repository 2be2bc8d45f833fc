import random

import pytest

from dioscuri.editor import InputEditor


def test_starts_with_cursor_at_end():
    editor = InputEditor("gemini://example.org/")
    assert editor.cursor == len("gemini://example.org/")


def test_backspace_then_type_replaces_last_character():
    editor = InputEditor("abc")

    editor.delete_before_cursor()
    editor.insert_char("d")

    assert editor.text == "abd"
    assert editor.cursor == 3


def test_insert_in_the_middle():
    editor = InputEditor("gemini://exmple.org/")
    for _ in range(len("mple.org/")):
        editor.move_left()

    editor.insert_char("a")

    assert editor.text == "gemini://example.org/"
    assert editor.cursor == len("gemini://exa")


def test_delete_at_start_is_a_no_op():
    editor = InputEditor("abc")
    for _ in range(5):
        editor.move_left()

    editor.delete_before_cursor()

    assert editor.text == "abc"
    assert editor.cursor == 0


def test_cursor_moves_are_clamped():
    editor = InputEditor("ab")
    editor.move_right()
    assert editor.cursor == 2

    editor.move_left()
    editor.move_left()
    editor.move_left()
    assert editor.cursor == 0


def test_cursor_counts_characters_not_bytes():
    editor = InputEditor("gemini://café.example/")
    for _ in range(len(".example/")):
        editor.move_left()

    editor.delete_before_cursor()
    editor.insert_char("é")
    editor.insert_char("s")

    assert editor.text == "gemini://cafés.example/"
    assert editor.cursor == len("gemini://cafés")


def test_reset_to_end():
    editor = InputEditor("abc")
    editor.move_left()
    editor.move_left()

    editor.reset_to_end()

    assert editor.cursor == 3


def test_insert_char_rejects_multiple_characters():
    with pytest.raises(ValueError):
        InputEditor().insert_char("ab")


@pytest.mark.parametrize("seed", range(20))
def test_cursor_stays_within_text_for_any_edit_sequence(seed):
    rng = random.Random(seed)
    editor = InputEditor(rng.choice(["", "a", "gemini://example.org/", "日本語"]))
    operations = [
        lambda: editor.insert_char(rng.choice("aé日/ ")),
        editor.delete_before_cursor,
        editor.move_left,
        editor.move_right,
    ]

    for _ in range(200):
        rng.choice(operations)()
        assert 0 <= editor.cursor <= len(editor.text)


@pytest.mark.parametrize("text, moves_left", [("", 0), ("abc", 0), ("abc", 2), ("abc", 3), ("日本語", 1)])
@pytest.mark.parametrize("char", ["x", "é", "語"])
def test_insert_then_delete_restores_state(text, moves_left, char):
    editor = InputEditor(text)
    for _ in range(moves_left):
        editor.move_left()
    before = (editor.text, editor.cursor)

    editor.insert_char(char)
    editor.delete_before_cursor()

    assert (editor.text, editor.cursor) == before
