"""
Note input resolution.

Decides what a cell holds after new input and whether the cursor moves on.
Two-keystroke entry of frets 10-24 works by combining a typed digit with
the fret already in the cell.
"""
from enum import Enum
from typing import Optional, Tuple

from tabmaker.constants import MAX_FRET
from tabmaker.models import Note, is_fret_label


class InputKind(Enum):
    """Source of a note entry."""
    DISCRETE = "discrete"        # technique button, fretboard click
    INCREMENTAL = "incremental"  # single-digit keystroke


def resolve_note_input(current: Optional[Note], label: str,
                       kind: InputKind) -> Tuple[str, bool]:
    """
    Resolve new cell content from existing content and incoming label.

    Args:
        current: Note currently in the cell (None if empty)
        label: Incoming label
        kind: Input source

    Returns:
        (new_label, advance_cursor)

    Example:
        >>> resolve_note_input(Note("2"), "4", InputKind.INCREMENTAL)
        ('24', True)
        >>> resolve_note_input(Note("2"), "5", InputKind.INCREMENTAL)
        ('5', False)
    """
    if kind is InputKind.DISCRETE:
        return label, True

    if current is not None and is_fret_label(current.fret) and is_fret_label(label):
        combined = current.fret + label
        if int(combined) <= MAX_FRET:
            return combined, True
        # Too high for the fretboard: start a new number
        return label, False

    return label, False
