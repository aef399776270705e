"""
Command pattern with snapshot-based undo/redo.

All document modifications go through commands so that:
- The pre-edit document is captured before anything changes
- A new edit always invalidates the redo history
- Each history entry carries a human-readable description
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional, List, Tuple

import msgpack

from tabmaker.constants import HISTORY_LIMIT, INITIAL_COLUMNS
from tabmaker.models import AppState, Column, Document
from tabmaker.note_input import InputKind
from tabmaker import block_ops, document_ops

logger = logging.getLogger(__name__)


class Command(ABC):
    """Base class for all commands."""

    @abstractmethod
    def apply(self, document: Document) -> Document:
        """
        Build the edited document.

        Args:
            document: Current document (never modified)

        Returns:
            New document after the edit
        """
        raise NotImplementedError()

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable command description for UI."""
        raise NotImplementedError()


class AddNoteCommand(Command):
    """Command to write a note at the cursor of the active block."""

    def __init__(self, string_index: int, label: str,
                 kind: InputKind = InputKind.INCREMENTAL):
        """
        Args:
            string_index: Target string (0-5)
            label: Fret label
            kind: Input source (digit combination applies to INCREMENTAL only)
        """
        self.string_index = string_index
        self.label = label
        self.kind = kind

    def apply(self, document: Document) -> Document:
        return document_ops.update_active_block(
            document,
            lambda b: block_ops.insert_note(b, self.string_index, self.label, self.kind),
        )

    @property
    def description(self) -> str:
        return "Add Note"


class DeleteNoteCommand(Command):
    """Command to clear the cell at the cursor."""

    def __init__(self, string_index: int):
        self.string_index = string_index

    def apply(self, document: Document) -> Document:
        return document_ops.update_active_block(
            document, lambda b: block_ops.delete_note(b, self.string_index)
        )

    @property
    def description(self) -> str:
        return "Delete Note"


class MoveCursorCommand(Command):
    """Command to move the cursor of the active block."""

    def __init__(self, position: int):
        self.position = position

    def apply(self, document: Document) -> Document:
        return document_ops.update_active_block(
            document, lambda b: block_ops.move_cursor(b, self.position)
        )

    @property
    def description(self) -> str:
        return "Move Cursor"


class InsertBarLineCommand(Command):
    """Command to write a bar line across all strings at the cursor."""

    def apply(self, document: Document) -> Document:
        return document_ops.update_active_block(document, block_ops.insert_bar_line)

    @property
    def description(self) -> str:
        return "Insert Bar Line"


class InsertSpaceCommand(Command):
    """Command to insert an empty column at the selection start or cursor."""

    def apply(self, document: Document) -> Document:
        selection = document.selection
        return document_ops.update_active_block(
            document, lambda b: block_ops.insert_space(b, selection)
        )

    @property
    def description(self) -> str:
        return "Insert Space"


class TransposeCommand(Command):
    """Command to shift every fret in the document."""

    def __init__(self, delta: int):
        """
        Args:
            delta: Semitones to shift (negative = down)
        """
        self.delta = delta

    def apply(self, document: Document) -> Document:
        return document_ops.transpose(document, self.delta)

    @property
    def description(self) -> str:
        return f"Transpose {self.delta:+d}"


class CutCommand(Command):
    """Command to copy a column range to the clipboard and clear it."""

    def __init__(self, start: int, end: int):
        """
        Args:
            start: First column (inclusive)
            end: Last column (inclusive)
        """
        self.start = start
        self.end = end
        self.cut_columns: Tuple[Column, ...] = ()

    def apply(self, document: Document) -> Document:
        block, self.cut_columns = block_ops.cut_range(
            document.current_block, self.start, self.end
        )
        return document_ops.replace_block(document, document.active_block, block)

    @property
    def description(self) -> str:
        return "Cut"


class PasteCommand(Command):
    """Command to splice copied columns in at the cursor."""

    def __init__(self, columns: Tuple[Column, ...]):
        self.columns = tuple(columns)

    def apply(self, document: Document) -> Document:
        return document_ops.update_active_block(
            document, lambda b: block_ops.paste_columns(b, self.columns)
        )

    @property
    def description(self) -> str:
        return "Paste"


class AddBlockCommand(Command):
    """Command to add an empty block below the active one."""

    def __init__(self, num_columns: int = INITIAL_COLUMNS):
        self.num_columns = num_columns

    def apply(self, document: Document) -> Document:
        return document_ops.add_block_below(document, self.num_columns)

    @property
    def description(self) -> str:
        return "Add Part"


class DuplicateBlockCommand(Command):
    """Command to duplicate a block."""

    def __init__(self, block_index: int):
        self.block_index = block_index

    def apply(self, document: Document) -> Document:
        return document_ops.duplicate_block_at(document, self.block_index)

    @property
    def description(self) -> str:
        return f"Duplicate Part {self.block_index + 1}"


class MoveBlockCommand(Command):
    """Command to swap a block with its neighbour."""

    def __init__(self, block_index: int, direction: int):
        """
        Args:
            block_index: Block to move
            direction: -1 (up) or +1 (down)
        """
        self.block_index = block_index
        self.direction = direction

    def apply(self, document: Document) -> Document:
        return document_ops.move_block(document, self.block_index, self.direction)

    @property
    def description(self) -> str:
        return "Move Part Up" if self.direction < 0 else "Move Part Down"


class RemoveBlockCommand(Command):
    """Command to remove the active block (unavailable for the last one)."""

    def apply(self, document: Document) -> Document:
        return document_ops.remove_active_block(document)

    @property
    def description(self) -> str:
        return "Remove Part"


class ClearAllCommand(Command):
    """Command to replace everything with a single empty block."""

    def __init__(self, num_columns: int = INITIAL_COLUMNS):
        self.num_columns = num_columns

    def apply(self, document: Document) -> Document:
        return document_ops.clear_all(self.num_columns)

    @property
    def description(self) -> str:
        return "Clear All"


class SetSongInfoCommand(Command):
    """Command to change song title and/or artist."""

    def __init__(self, title: Optional[str] = None, artist: Optional[str] = None):
        self.title = title
        self.artist = artist

    def apply(self, document: Document) -> Document:
        return document_ops.set_song_info(document, self.title, self.artist)

    @property
    def description(self) -> str:
        return "Edit Song Info"


class SetBlockTitleCommand(Command):
    """Command to rename a block."""

    def __init__(self, block_index: int, title: str):
        self.block_index = block_index
        self.title = title

    def apply(self, document: Document) -> Document:
        return document_ops.set_block_title(document, self.block_index, self.title)

    @property
    def description(self) -> str:
        return "Rename Part"


class ReplaceDocumentCommand(Command):
    """Command to install a whole document (import, project load)."""

    def __init__(self, document: Document, description: str = "Import"):
        self.document = document
        self._description = description

    def apply(self, document: Document) -> Document:
        return self.document

    @property
    def description(self) -> str:
        return self._description


def pack_document(document: Document) -> bytes:
    """Serialize a document snapshot (blocks and song info)."""
    return msgpack.packb(document.to_dict(), use_bin_type=True)


def unpack_document(snapshot: bytes) -> Document:
    """Rebuild a document from a snapshot."""
    return Document.from_dict(msgpack.unpackb(snapshot, raw=False))


class CommandHistory:
    """Manages undo/redo as bounded stacks of document snapshots."""

    def __init__(self, app_state: AppState, max_history: int = HISTORY_LIMIT):
        """
        Args:
            app_state: Application state to operate on
            max_history: Maximum number of snapshots kept on each stack
        """
        if max_history < 1:
            raise ValueError(f"History depth must be positive, got {max_history}")
        self.app_state = app_state
        self.max_history = max_history
        self._undo_stack: List[Tuple[bytes, str]] = []
        self._redo_stack: List[Tuple[bytes, str]] = []

    def record_mutation(self, description: str = ""):
        """
        Snapshot the current document before it changes.

        Evicts the oldest snapshot beyond the depth limit and clears the
        redo stack.
        """
        self._push(self._undo_stack, (pack_document(self.app_state.get_document()), description))
        self._redo_stack.clear()

    def execute(self, command: Command) -> bool:
        """
        Execute command, recording history if content changed.

        Changes to the active block or selection alone are applied without
        a history entry.

        Returns:
            True if a snapshot was recorded
        """
        document = self.app_state.get_document()
        new_document = command.apply(document)

        if new_document.content_equals(document):
            self.app_state.set_document(new_document)
            return False

        self.record_mutation(command.description)
        self.app_state.set_document(new_document)
        self.app_state.mark_dirty()
        logger.debug("Executed %s (undo depth %d)", command.description, len(self._undo_stack))
        return True

    def undo(self) -> bool:
        """Restore the most recent snapshot. Returns True if successful."""
        if not self.can_undo():
            return False

        snapshot, description = self._undo_stack.pop()
        self._push(self._redo_stack, (pack_document(self.app_state.get_document()), description))
        self._restore(snapshot)
        logger.debug("Undo %s", description)
        return True

    def redo(self) -> bool:
        """Restore the most recently undone snapshot. Returns True if successful."""
        if not self.can_redo():
            return False

        snapshot, description = self._redo_stack.pop()
        self._push(self._undo_stack, (pack_document(self.app_state.get_document()), description))
        self._restore(snapshot)
        logger.debug("Redo %s", description)
        return True

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return len(self._undo_stack) > 0

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return len(self._redo_stack) > 0

    @property
    def undo_depth(self) -> int:
        return len(self._undo_stack)

    @property
    def redo_depth(self) -> int:
        return len(self._redo_stack)

    def clear(self):
        """Clear all history."""
        self._undo_stack.clear()
        self._redo_stack.clear()

    def get_undo_description(self) -> Optional[str]:
        """Get description of the edit that would be undone."""
        if self.can_undo():
            return self._undo_stack[-1][1]
        return None

    def get_redo_description(self) -> Optional[str]:
        """Get description of the edit that would be redone."""
        if self.can_redo():
            return self._redo_stack[-1][1]
        return None

    def _push(self, stack: List[Tuple[bytes, str]], entry: Tuple[bytes, str]):
        stack.append(entry)
        # Limit history size
        if len(stack) > self.max_history:
            stack.pop(0)

    def _restore(self, snapshot: bytes):
        current = self.app_state.get_document()
        restored = document_ops.fit_to(
            unpack_document(snapshot), current.active_block, current.selection
        )
        self.app_state.set_document(restored)
        self.app_state.mark_dirty()
