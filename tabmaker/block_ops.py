"""
Pure editing operations on a single block.

Every function takes a Block and returns a new Block (or a tuple of
columns); nothing here touches editor state or history.
"""
from dataclasses import replace
from typing import Optional, Tuple

from tabmaker.constants import (
    NUM_STRINGS, BAR_LINE, MIN_FRET, MAX_FRET, DUPLICATE_SUFFIX, INITIAL_COLUMNS,
)
from tabmaker.models import Block, Column, Note, EMPTY_COLUMN, new_block_id
from tabmaker.note_input import InputKind, resolve_note_input

Selection = Optional[Tuple[int, int]]


def _check_string(string_index: int):
    if not 0 <= string_index < NUM_STRINGS:
        raise ValueError(f"String index must be 0-{NUM_STRINGS - 1}, got {string_index}")


def _ensure_cursor_column(block: Block) -> Tuple[Column, ...]:
    """Columns of the block, grown by one empty column if the cursor is past the end."""
    if block.cursor >= len(block.columns):
        return block.columns + (EMPTY_COLUMN,)
    return block.columns


def _clamp_range(block: Block, start: int, end: int) -> Optional[Tuple[int, int]]:
    """Normalise an inclusive range to the block; None if nothing is covered."""
    start, end = min(start, end), max(start, end)
    start = max(0, start)
    end = min(end, len(block.columns) - 1)
    if start > end:
        return None
    return start, end


def new_block(num_columns: int = INITIAL_COLUMNS) -> Block:
    """Create an untitled, empty block."""
    return Block.empty(num_columns)


def insert_note(block: Block, string_index: int, label: str,
                kind: InputKind = InputKind.INCREMENTAL) -> Block:
    """
    Write a note at (cursor, string).

    Args:
        block: Block to edit
        string_index: Target string (0-5)
        label: Incoming fret label
        kind: Input source, decides digit combination and cursor advance

    Returns:
        New block with the note written
    """
    _check_string(string_index)
    columns = list(_ensure_cursor_column(block))
    column = list(columns[block.cursor])

    new_label, advance = resolve_note_input(column[string_index], label, kind)
    column[string_index] = Note(fret=new_label)
    columns[block.cursor] = tuple(column)

    cursor = block.cursor + 1 if advance else block.cursor
    return replace(block, columns=tuple(columns), cursor=cursor)


def insert_bar_line(block: Block) -> Block:
    """Overwrite the column at the cursor with a bar line and advance."""
    columns = list(_ensure_cursor_column(block))
    columns[block.cursor] = (Note(fret=BAR_LINE),) * NUM_STRINGS
    return replace(block, columns=tuple(columns), cursor=block.cursor + 1)


def insert_space(block: Block, selection: Selection = None) -> Block:
    """
    Splice one empty column into the block.

    Inserted at the selection start when a selection exists, else at the
    cursor. The cursor only advances when there is no selection.
    """
    if selection is not None:
        position = max(0, min(selection[0], len(block.columns)))
        cursor = block.cursor
    else:
        position = block.cursor
        cursor = block.cursor + 1

    columns = block.columns[:position] + (EMPTY_COLUMN,) + block.columns[position:]
    return replace(block, columns=columns, cursor=min(cursor, len(columns)))


def delete_note(block: Block, string_index: int) -> Block:
    """Clear the cell at (cursor, string). Columns never shift."""
    _check_string(string_index)
    if block.cursor >= len(block.columns):
        return block

    columns = list(block.columns)
    column = list(columns[block.cursor])
    column[string_index] = None
    columns[block.cursor] = tuple(column)
    return replace(block, columns=tuple(columns))


def move_cursor(block: Block, position: int) -> Block:
    """Move the cursor, clamped to 0..len(columns) (one past the end appends)."""
    position = max(0, min(position, len(block.columns)))
    if position == block.cursor:
        return block
    return replace(block, cursor=position)


def _transpose_note(note: Optional[Note], delta: int) -> Optional[Note]:
    if note is None or note.fret_number is None:
        return note
    shifted = note.fret_number + delta
    if MIN_FRET <= shifted <= MAX_FRET:
        return Note(fret=str(shifted))
    # Out of range: leave this cell alone
    return note


def transpose_block(block: Block, delta: int) -> Block:
    """
    Shift every fret in the block by delta semitones.

    Cells whose result would fall outside the fret range keep their value;
    bar lines and techniques are never touched.
    """
    if delta == 0:
        return block
    columns = tuple(
        tuple(_transpose_note(note, delta) for note in column)
        for column in block.columns
    )
    return replace(block, columns=columns)


def copy_range(block: Block, start: int, end: int) -> Tuple[Column, ...]:
    """
    Copy an inclusive column range.

    The range is clamped to the block. Columns are immutable, so the copy
    never aliases the block's storage.
    """
    bounds = _clamp_range(block, start, end)
    if bounds is None:
        return ()
    start, end = bounds
    return tuple(tuple(column) for column in block.columns[start:end + 1])


def cut_range(block: Block, start: int, end: int) -> Tuple[Block, Tuple[Column, ...]]:
    """
    Copy an inclusive column range, then clear it.

    Returns:
        (block with the range cleared, copied columns)
        The column count is preserved.
    """
    copied = copy_range(block, start, end)
    bounds = _clamp_range(block, start, end)
    if bounds is None:
        return block, copied
    start, end = bounds

    columns = (
        block.columns[:start]
        + (EMPTY_COLUMN,) * (end - start + 1)
        + block.columns[end + 1:]
    )
    return replace(block, columns=columns), copied


def paste_columns(block: Block, columns: Tuple[Column, ...]) -> Block:
    """Splice columns in at the cursor; the cursor moves past them."""
    if not columns:
        return block
    for column in columns:
        if len(column) != NUM_STRINGS:
            raise ValueError(f"Pasted column must have {NUM_STRINGS} cells, got {len(column)}")

    position = block.cursor
    new_columns = block.columns[:position] + tuple(columns) + block.columns[position:]
    return replace(block, columns=new_columns, cursor=position + len(columns))


def set_title(block: Block, title: str) -> Block:
    return replace(block, title=title)


def duplicate_block(block: Block) -> Block:
    """
    Copy a block under a new id.

    A non-empty title gets the copy suffix; an untitled block stays untitled.
    """
    title = block.title + DUPLICATE_SUFFIX if block.title else ""
    return replace(block, block_id=new_block_id(), title=title)
