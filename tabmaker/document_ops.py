"""
Pure operations on a whole document: block list, active block, selection
and song metadata.
"""
from dataclasses import replace
from typing import Callable, Optional, Tuple

from tabmaker.constants import INITIAL_COLUMNS
from tabmaker.models import Block, Document, SongInfo
from tabmaker import block_ops


def set_active_block(doc: Document, index: int) -> Document:
    """Focus a block (clamped into range). Any selection is dropped."""
    index = max(0, min(index, len(doc.blocks) - 1))
    if index == doc.active_block:
        return doc
    return replace(doc, active_block=index, selection=None)


def set_selection(doc: Document, selection: Optional[Tuple[int, int]]) -> Document:
    """
    Set the inclusive column selection of the active block.

    The range is normalised (start <= end) and clamped to the block;
    None, or a range outside the block, clears it.
    """
    if selection is None:
        return replace(doc, selection=None)

    start, end = min(selection), max(selection)
    last = doc.current_block.num_columns - 1
    start, end = max(0, start), min(end, last)
    if start > end:
        return replace(doc, selection=None)
    return replace(doc, selection=(start, end))


def replace_block(doc: Document, index: int, block: Block) -> Document:
    blocks = doc.blocks[:index] + (block,) + doc.blocks[index + 1:]
    return replace(doc, blocks=blocks)


def update_active_block(doc: Document, updater: Callable[[Block], Block]) -> Document:
    """Apply a block operation to the active block."""
    return replace_block(doc, doc.active_block, updater(doc.current_block))


def add_block_below(doc: Document, num_columns: int = INITIAL_COLUMNS) -> Document:
    """Insert a new empty block after the active one and focus it."""
    index = doc.active_block + 1
    blocks = doc.blocks[:index] + (block_ops.new_block(num_columns),) + doc.blocks[index:]
    return replace(doc, blocks=blocks, active_block=index, selection=None)


def duplicate_block_at(doc: Document, index: int) -> Document:
    """Insert a copy of the block at index right after it and focus the copy."""
    if not 0 <= index < len(doc.blocks):
        raise ValueError(f"Block index {index} out of range")
    copy = block_ops.duplicate_block(doc.blocks[index])
    blocks = doc.blocks[:index + 1] + (copy,) + doc.blocks[index + 1:]
    return replace(doc, blocks=blocks, active_block=index + 1, selection=None)


def move_block(doc: Document, index: int, direction: int) -> Document:
    """
    Swap a block with its neighbour.

    Args:
        doc: Document to edit
        index: Block to move
        direction: -1 (up) or +1 (down)

    Returns:
        New document with the moved block active. Unchanged at the boundary.
    """
    if direction not in (-1, 1):
        raise ValueError(f"Direction must be -1 or 1, got {direction}")
    if not 0 <= index < len(doc.blocks):
        raise ValueError(f"Block index {index} out of range")

    target = index + direction
    if not 0 <= target < len(doc.blocks):
        return doc

    blocks = list(doc.blocks)
    blocks[index], blocks[target] = blocks[target], blocks[index]
    return replace(doc, blocks=tuple(blocks), active_block=target, selection=None)


def remove_active_block(doc: Document) -> Document:
    """Remove the active block. The last remaining block cannot be removed."""
    if len(doc.blocks) <= 1:
        return doc
    removed = doc.active_block
    blocks = doc.blocks[:removed] + doc.blocks[removed + 1:]
    return replace(doc, blocks=blocks, active_block=max(0, removed - 1), selection=None)


def clear_all(num_columns: int = INITIAL_COLUMNS) -> Document:
    """Fresh document: one empty block, no selection, no song info."""
    return Document(blocks=(block_ops.new_block(num_columns),))


def set_song_info(doc: Document, title: Optional[str] = None,
                  artist: Optional[str] = None) -> Document:
    info = SongInfo(
        title=doc.info.title if title is None else title,
        artist=doc.info.artist if artist is None else artist,
    )
    return replace(doc, info=info)


def set_block_title(doc: Document, index: int, title: str) -> Document:
    if not 0 <= index < len(doc.blocks):
        raise ValueError(f"Block index {index} out of range")
    return replace_block(doc, index, block_ops.set_title(doc.blocks[index], title))


def transpose(doc: Document, delta: int) -> Document:
    """Shift every fret in every block (cells that would leave the fret range are kept)."""
    blocks = tuple(block_ops.transpose_block(b, delta) for b in doc.blocks)
    return replace(doc, blocks=blocks)


def fit_to(doc: Document, active_block: int,
           selection: Optional[Tuple[int, int]]) -> Document:
    """
    Carry bookkeeping over to a restored document.

    The active index is clamped into range; a selection that no longer fits
    the active block is dropped.
    """
    active = max(0, min(active_block, len(doc.blocks) - 1))
    restored = replace(doc, active_block=active, selection=None)
    if selection is not None and selection[1] < restored.current_block.num_columns:
        restored = replace(restored, selection=selection)
    return restored
