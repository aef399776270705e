"""
Immutable data models for Hunter Tab Maker.

All document models are immutable dataclasses to support:
- Easy undo/redo via full-document snapshots
- Clipboard contents that never alias the live grid
- Cheap equality checks between document versions
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Optional, Dict, Any, List

from tabmaker.constants import (
    NUM_STRINGS, BAR_LINE, TECHNIQUE_SYMBOLS, Technique, INITIAL_COLUMNS,
    PROJECT_VERSION,
)


class NoteKind(Enum):
    """Classification of a cell label."""
    FRET = "fret"
    BAR_LINE = "bar_line"
    TECHNIQUE = "technique"


def is_fret_label(label: str) -> bool:
    """Check whether a label is a non-negative integer in text form."""
    return label.isascii() and label.isdigit()


def is_valid_label(label: str) -> bool:
    """Check whether a label can be stored in a cell."""
    return is_fret_label(label) or label == BAR_LINE or label in TECHNIQUE_SYMBOLS


@dataclass(frozen=True)
class Note:
    """
    Single annotation occupying one (string, column) cell.

    Attributes:
        fret: Label text - fret number ("0", "12"), bar line ("|")
              or technique symbol ("h", "p", "b", ...)
    """
    fret: str

    def __post_init__(self):
        """Validate label."""
        if not isinstance(self.fret, str) or not is_valid_label(self.fret):
            raise ValueError(f"Invalid fret label: {self.fret!r}")

    @property
    def kind(self) -> NoteKind:
        if is_fret_label(self.fret):
            return NoteKind.FRET
        if self.fret == BAR_LINE:
            return NoteKind.BAR_LINE
        return NoteKind.TECHNIQUE

    @property
    def fret_number(self) -> Optional[int]:
        """Fret as integer, or None for bar lines and techniques."""
        if self.kind is NoteKind.FRET:
            return int(self.fret)
        return None

    @property
    def technique(self) -> Optional[Technique]:
        if self.kind is NoteKind.TECHNIQUE:
            return Technique(self.fret)
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"fret": self.fret}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Note":
        """Create Note from dictionary."""
        return cls(fret=data["fret"])


# One time-slice across all strings, index 0 = high e
Column = Tuple[Optional[Note], ...]

EMPTY_COLUMN: Column = (None,) * NUM_STRINGS


def new_block_id() -> str:
    """Generate a unique block identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Block:
    """
    Song part: one independent tablature grid.

    Attributes:
        block_id: Stable unique identifier (never reused or recomputed)
        columns: Tuple of columns, each holding NUM_STRINGS cells
        cursor: Column index where input is written (may be one past the end)
        title: Free-text section label (may be empty)
    """
    block_id: str = field(default_factory=new_block_id)
    columns: Tuple[Column, ...] = field(default_factory=tuple)
    cursor: int = 0
    title: str = ""

    def __post_init__(self):
        """Validate grid shape and cursor."""
        for i, column in enumerate(self.columns):
            if len(column) != NUM_STRINGS:
                raise ValueError(
                    f"Column {i} must have {NUM_STRINGS} cells, got {len(column)}"
                )
        if not 0 <= self.cursor <= len(self.columns):
            raise ValueError(
                f"Cursor must be 0-{len(self.columns)}, got {self.cursor}"
            )

    @classmethod
    def empty(cls, num_columns: int = INITIAL_COLUMNS, title: str = "") -> "Block":
        """Create an untitled block of empty columns with a fresh id."""
        if num_columns < 0:
            raise ValueError(f"Column count must be non-negative, got {num_columns}")
        return cls(columns=(EMPTY_COLUMN,) * num_columns, title=title)

    @property
    def num_columns(self) -> int:
        return len(self.columns)

    def get_note(self, column: int, string_index: int) -> Optional[Note]:
        """Get the note at a cell, or None if empty or past the end."""
        if not 0 <= string_index < NUM_STRINGS:
            raise ValueError(f"String index must be 0-{NUM_STRINGS - 1}, got {string_index}")
        if not 0 <= column < len(self.columns):
            return None
        return self.columns[column][string_index]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "block_id": self.block_id,
            "columns": [
                [note.fret if note else None for note in column]
                for column in self.columns
            ],
            "cursor": self.cursor,
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Block":
        """Create Block from dictionary."""
        columns = tuple(
            tuple(Note(fret=label) if label is not None else None for label in column)
            for column in data.get("columns", [])
        )
        return cls(
            block_id=data.get("block_id") or new_block_id(),
            columns=columns,
            cursor=min(data.get("cursor", 0), len(columns)),
            title=data.get("title", ""),
        )


@dataclass(frozen=True)
class SongInfo:
    """
    Global song metadata, independent of any block.

    Attributes:
        title: Song title
        artist: Artist / other information
    """
    title: str = ""
    artist: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"title": self.title, "artist": self.artist}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SongInfo":
        """Create SongInfo from dictionary."""
        return cls(title=data.get("title", ""), artist=data.get("artist", ""))


@dataclass(frozen=True)
class Document:
    """
    Complete tablature: ordered blocks plus song metadata.

    Attributes:
        blocks: Tuple of Block objects (never empty)
        info: Song title / artist
        active_block: Index of the block receiving input
        selection: Inclusive (start, end) column range in the active block, or None

    Only blocks and info are persisted by to_dict(); the active block and
    selection are editor bookkeeping.
    """
    blocks: Tuple[Block, ...] = field(default_factory=lambda: (Block.empty(),))
    info: SongInfo = field(default_factory=SongInfo)
    active_block: int = 0
    selection: Optional[Tuple[int, int]] = None

    def __post_init__(self):
        """Validate document structure."""
        if not self.blocks:
            raise ValueError("Document must contain at least one block")
        if not 0 <= self.active_block < len(self.blocks):
            raise ValueError(
                f"Active block must be 0-{len(self.blocks) - 1}, got {self.active_block}"
            )
        if self.selection is not None:
            start, end = self.selection
            if not 0 <= start <= end:
                raise ValueError(f"Invalid selection: {self.selection}")

    @property
    def current_block(self) -> Block:
        return self.blocks[self.active_block]

    def block_ids(self) -> List[str]:
        return [b.block_id for b in self.blocks]

    def content_equals(self, other: "Document") -> bool:
        """Compare persisted content only (blocks and info)."""
        return self.blocks == other.blocks and self.info == other.info

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "version": PROJECT_VERSION,
            "info": self.info.to_dict(),
            "blocks": [b.to_dict() for b in self.blocks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        """Create Document from dictionary."""
        blocks = tuple(Block.from_dict(b) for b in data.get("blocks", []))
        if not blocks:
            blocks = (Block.empty(),)
        return cls(
            blocks=blocks,
            info=SongInfo.from_dict(data.get("info", {})),
        )


class AppState:
    """
    Mutable editor state, owned by a single TabEditor.

    Manages:
    - Current document
    - Active string (row receiving keyboard input)
    - Clipboard (columns copied or cut, independent of history)
    - Unsaved-changes flag
    """

    def __init__(self, document: Optional[Document] = None):
        """Initialize state with a fresh document unless one is given."""
        self._document: Document = document if document is not None else Document()
        self._active_string: int = 0
        self._clipboard: Tuple[Column, ...] = ()
        self._is_dirty: bool = False

    def get_document(self) -> Document:
        """Get current document."""
        return self._document

    def set_document(self, document: Document):
        """Set current document."""
        self._document = document

    def get_active_string(self) -> int:
        """Get index of string receiving input."""
        return self._active_string

    def set_active_string(self, string_index: int):
        """Set active string, clamped to the instrument's strings."""
        self._active_string = max(0, min(NUM_STRINGS - 1, string_index))

    def get_clipboard(self) -> Tuple[Column, ...]:
        """Get copied columns."""
        return self._clipboard

    def set_clipboard(self, columns: Tuple[Column, ...]):
        """Replace clipboard contents."""
        self._clipboard = tuple(columns)

    def is_dirty(self) -> bool:
        """Check if document has unsaved changes."""
        return self._is_dirty

    def mark_dirty(self):
        """Mark document as having unsaved changes."""
        self._is_dirty = True

    def mark_clean(self):
        """Mark document as saved."""
        self._is_dirty = False
