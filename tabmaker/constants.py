"""
Guitar and tablature constants.

String names, fret range, technique symbols, file-format markers, etc.
"""
from enum import Enum

# Instrument strings, high to low pitch (row order on screen and in files)
NUM_STRINGS = 6
STRING_NAMES = ["e", "B", "G", "D", "A", "E"]

# Standard tuning, MIDI note of each open string (E4 B3 G3 D3 A2 E2)
OPEN_STRING_NOTES = [64, 59, 55, 50, 45, 40]

# Fret range of the instrument (not configurable)
MIN_FRET = 0
MAX_FRET = 24

# Grid defaults
INITIAL_COLUMNS = 60
HISTORY_LIMIT = 20

# Cell labels
BAR_LINE = "|"
CELL_WIDTH = 2
CELL_PAD = "-"

# Text export markers
TAB_PREAMBLE = "Hunter Tab Maker - Composição"
SONG_TITLE_MARKER = "Título Música:"
ARTIST_MARKER = "Artista:"
PART_MARKER = "Parte"
BLOCK_TITLE_MARKER = "Título:"
DUPLICATE_SUFFIX = " (Cópia)"

# File names and extensions
TAB_EXTENSION = ".txt"
PROJECT_EXTENSION = ".htab"
FALLBACK_EXPORT_NAME = "hunter_tab"
PROJECT_VERSION = "1.0.0"


class Technique(Enum):
    """Playing technique symbols that can occupy a cell."""
    HAMMER_ON = "h"
    PULL_OFF = "p"
    BEND = "b"
    SLIDE = "s"
    RELEASE = "r"
    TAP = "t"
    MUTE = "x"
    VIBRATO = "~"
    SLIDE_UP = "/"
    SLIDE_DOWN = "\\"
    SUSTAIN = "-"


TECHNIQUE_SYMBOLS = frozenset(t.value for t in Technique)


def string_name(string_index: int) -> str:
    """
    Get the display name of a string.

    Args:
        string_index: String index (0 = high e, 5 = low E)

    Returns:
        String name (e.g., "e", "A")
    """
    if not 0 <= string_index < NUM_STRINGS:
        raise ValueError(f"String index must be 0-{NUM_STRINGS - 1}, got {string_index}")
    return STRING_NAMES[string_index]


def index_of_string(name: str) -> int:
    """
    Get the index of a string from its name.

    Names are case sensitive: "e" is the high string, "E" the low one.

    Example:
        >>> index_of_string("G")
        2
    """
    try:
        return STRING_NAMES.index(name)
    except ValueError:
        raise ValueError(f"Unknown string name: {name!r}") from None


def fret_to_midi(string_index: int, fret: int) -> int:
    """
    Convert a fretted position to a MIDI note number in standard tuning.

    Example:
        >>> fret_to_midi(5, 5)
        45
    """
    return OPEN_STRING_NOTES[string_index] + fret
