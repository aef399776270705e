"""
Plain-text tablature format (export and import).

File format:
- Preamble line, optional song title / artist lines, blank line
- Per block: "Parte <n>", optional "Título: <title>", six string rows
  (e B G D A E) made of 2-character cells, blank line

Cells are labels padded with '-' to width 2. Labels wider than 2
characters are written as-is and will not re-import cleanly.
"""
import logging
import re
from typing import List, Optional

from tabmaker.constants import (
    NUM_STRINGS, CELL_WIDTH, CELL_PAD, TAB_PREAMBLE,
    SONG_TITLE_MARKER, ARTIST_MARKER, PART_MARKER, BLOCK_TITLE_MARKER,
    index_of_string, string_name,
)
from tabmaker.models import Block, Column, Document, Note, SongInfo, is_valid_label

logger = logging.getLogger(__name__)

STRING_ROW = re.compile(r"^([eBGDAE]) \|\s?(.*)$")
LINE_BREAK = re.compile(r"[\r\n]+")


class TabFormatError(ValueError):
    """Raised when text contains no readable tablature."""


def format_cell(note: Optional[Note]) -> str:
    """Render one cell: label left-justified and padded with '-'."""
    if note is None:
        return CELL_PAD * CELL_WIDTH
    return note.fret.ljust(CELL_WIDTH, CELL_PAD)


def single_line(text: str) -> str:
    """Collapse line breaks so free text stays on its marker line."""
    return LINE_BREAK.sub(" ", text)


def export_tab(document: Document) -> str:
    """
    Serialize a document to the plain-text tab format.

    Args:
        document: Document to export

    Returns:
        Complete file contents
    """
    lines = [TAB_PREAMBLE]
    if document.info.title:
        lines.append(f"{SONG_TITLE_MARKER} {single_line(document.info.title)}")
    if document.info.artist:
        lines.append(f"{ARTIST_MARKER} {single_line(document.info.artist)}")
    lines.append("")

    for number, block in enumerate(document.blocks, start=1):
        lines.append(f"{PART_MARKER} {number}")
        if block.title:
            lines.append(f"{BLOCK_TITLE_MARKER} {single_line(block.title)}")
        for s in range(NUM_STRINGS):
            cells = "".join(format_cell(column[s]) for column in block.columns)
            lines.append(f"{string_name(s)} |{cells}")
        lines.append("")

    return "\n".join(lines) + "\n"


def parse_cell(chunk: str) -> Optional[Note]:
    """Read one cell; anything that is not a clean label is an empty cell."""
    label = chunk.strip().rstrip(CELL_PAD)
    if not label or not is_valid_label(label):
        return None
    return Note(fret=label)


class _TabParser:
    """Line-by-line state machine for the text format."""

    def __init__(self):
        self.blocks: List[Block] = []
        self._title = ""
        self._artist = ""
        self._seen_part = False
        self._pending_title = ""
        self._reset_block()

    def _reset_block(self):
        self._columns: List[List[Optional[Note]]] = []
        self._num_columns: Optional[int] = None
        self._rows_found = 0

    def feed(self, line: str):
        line = line.rstrip("\r")

        # Song metadata is only read before the first part
        if not self._seen_part:
            if line.startswith(SONG_TITLE_MARKER):
                self._title = line[len(SONG_TITLE_MARKER):].strip()
                return
            if line.startswith(ARTIST_MARKER):
                self._artist = line[len(ARTIST_MARKER):].strip()
                return

        if line.startswith(PART_MARKER):
            self._seen_part = True
            self._pending_title = ""
            self._reset_block()
            return

        if line.startswith(BLOCK_TITLE_MARKER):
            self._pending_title = line[len(BLOCK_TITLE_MARKER):].strip()
            return

        match = STRING_ROW.match(line)
        if match:
            self._read_row(index_of_string(match.group(1)), match.group(2).rstrip())

    def _read_row(self, string_idx: int, content: str):
        if self._num_columns is None:
            # First row of the block fixes its width
            self._num_columns = len(content) // CELL_WIDTH
            self._columns = [[None] * NUM_STRINGS for _ in range(self._num_columns)]

        for c in range(min(self._num_columns, len(content) // CELL_WIDTH)):
            chunk = content[c * CELL_WIDTH:(c + 1) * CELL_WIDTH]
            note = parse_cell(chunk)
            if note is not None:
                self._columns[c][string_idx] = note

        self._rows_found += 1
        if self._rows_found == NUM_STRINGS:
            self._commit()

    def _commit(self):
        columns: List[Column] = [tuple(column) for column in self._columns]
        self.blocks.append(Block(columns=tuple(columns), title=self._pending_title))
        logger.debug("Parsed part %d: %d columns", len(self.blocks), len(columns))
        self._pending_title = ""
        self._reset_block()

    def result(self) -> Document:
        if not self.blocks:
            raise TabFormatError("No tablature parts found")
        return Document(
            blocks=tuple(self.blocks),
            info=SongInfo(title=self._title, artist=self._artist),
        )


def parse_tab(text: str) -> Document:
    """
    Parse plain-text tablature into a new document.

    Unknown lines are ignored and unreadable cells become empty cells.

    Args:
        text: File contents

    Returns:
        Parsed document (first block active, no selection)

    Raises:
        TabFormatError: If no complete part was found
    """
    parser = _TabParser()
    for line in text.split("\n"):
        parser.feed(line)
    return parser.result()
