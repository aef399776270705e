"""
Tablature editor controller.

TabEditor is the single owner of editor state: the document, the undo/redo
history, the clipboard and the active string. Front ends translate their
events into calls on it; every edit goes through a command so the pre-edit
document is snapshotted first.
"""
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from tabmaker.commands import (
    Command, CommandHistory, AddNoteCommand, DeleteNoteCommand, MoveCursorCommand,
    InsertBarLineCommand, InsertSpaceCommand, TransposeCommand, CutCommand,
    PasteCommand, AddBlockCommand, DuplicateBlockCommand, MoveBlockCommand,
    RemoveBlockCommand, ClearAllCommand, SetSongInfoCommand, SetBlockTitleCommand,
    ReplaceDocumentCommand,
)
from tabmaker.models import AppState, Column, Document
from tabmaker.note_input import InputKind
from tabmaker.persistence import TabFile, ProjectFile, export_filename
from tabmaker.settings import Settings
from tabmaker.tab_format import TabFormatError, export_tab, parse_tab
from tabmaker.midi_converter import MIDIConverter
from tabmaker import block_ops, document_ops

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class TabEditor:
    """Editing API over one document."""

    def __init__(self, settings: Optional[Settings] = None):
        """
        Args:
            settings: User settings (defaults if None; nothing read from disk)
        """
        self.settings = settings if settings is not None else Settings()
        self.app_state = AppState(document_ops.clear_all(self.settings.initial_columns))
        self.history = CommandHistory(self.app_state, max_history=self.settings.undo_limit)

    # ---- State access ----

    @property
    def document(self) -> Document:
        return self.app_state.get_document()

    @property
    def active_string(self) -> int:
        return self.app_state.get_active_string()

    @property
    def clipboard(self) -> Tuple[Column, ...]:
        return self.app_state.get_clipboard()

    def execute(self, command: Command) -> bool:
        """Run a command through history. Returns True if the document changed."""
        return self.history.execute(command)

    # ---- Note entry ----

    def add_note(self, string_index: int, label: str,
                 kind: InputKind = InputKind.INCREMENTAL) -> bool:
        """
        Enter a label on a string at the cursor.

        The string becomes the active string for later keystrokes.
        """
        self.app_state.set_active_string(string_index)
        return self.execute(AddNoteCommand(string_index, label, kind))

    def type_digit(self, digit: str) -> bool:
        """Keyboard digit entry on the active string."""
        return self.add_note(self.active_string, digit, InputKind.INCREMENTAL)

    def fretboard_click(self, string_index: int, fret: int) -> bool:
        return self.add_note(string_index, str(fret), InputKind.DISCRETE)

    def add_symbol(self, symbol: str) -> bool:
        """Technique button: writes the symbol on the active string and advances."""
        return self.add_note(self.active_string, symbol, InputKind.DISCRETE)

    def delete_note(self) -> bool:
        return self.execute(DeleteNoteCommand(self.active_string))

    def insert_bar_line(self) -> bool:
        return self.execute(InsertBarLineCommand())

    def insert_space(self) -> bool:
        return self.execute(InsertSpaceCommand())

    def transpose(self, delta: int) -> bool:
        return self.execute(TransposeCommand(delta))

    # ---- Cursor, string and selection ----

    def move_cursor(self, position: int) -> bool:
        return self.execute(MoveCursorCommand(position))

    def cursor_left(self) -> bool:
        return self.move_cursor(self.document.current_block.cursor - 1)

    def cursor_right(self) -> bool:
        return self.move_cursor(self.document.current_block.cursor + 1)

    def select_string(self, string_index: int):
        self.app_state.set_active_string(string_index)

    def string_up(self):
        self.app_state.set_active_string(self.active_string - 1)

    def string_down(self):
        self.app_state.set_active_string(self.active_string + 1)

    def set_selection(self, selection: Optional[Tuple[int, int]]):
        """Select an inclusive column range of the active block (None clears)."""
        self.app_state.set_document(document_ops.set_selection(self.document, selection))

    def select_block(self, index: int):
        self.app_state.set_document(document_ops.set_active_block(self.document, index))

    # ---- Clipboard ----

    def copy(self) -> bool:
        """Copy the selection to the clipboard. Returns False without a selection."""
        selection = self.document.selection
        if selection is None:
            return False
        self.app_state.set_clipboard(
            block_ops.copy_range(self.document.current_block, *selection)
        )
        return True

    def cut(self) -> bool:
        """Copy the selection to the clipboard and clear it."""
        selection = self.document.selection
        if selection is None:
            return False
        command = CutCommand(*selection)
        self.execute(command)
        self.app_state.set_clipboard(command.cut_columns)
        return True

    def paste(self) -> bool:
        """Insert clipboard columns at the cursor."""
        if not self.clipboard:
            return False
        return self.execute(PasteCommand(self.clipboard))

    # ---- Blocks ----

    def add_block(self) -> bool:
        return self.execute(AddBlockCommand(self.settings.initial_columns))

    def duplicate_block(self, index: Optional[int] = None) -> bool:
        if index is None:
            index = self.document.active_block
        return self.execute(DuplicateBlockCommand(index))

    def move_block(self, index: int, direction: int) -> bool:
        return self.execute(MoveBlockCommand(index, direction))

    def remove_block(self) -> bool:
        """Remove the active block; unavailable when only one block remains."""
        return self.execute(RemoveBlockCommand())

    def clear_all(self) -> bool:
        return self.execute(ClearAllCommand(self.settings.initial_columns))

    def set_song_info(self, title: Optional[str] = None, artist: Optional[str] = None) -> bool:
        return self.execute(SetSongInfoCommand(title, artist))

    def set_block_title(self, index: int, title: str) -> bool:
        return self.execute(SetBlockTitleCommand(index, title))

    # ---- History ----

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    # ---- Import / export ----

    def export_text(self) -> str:
        return export_tab(self.document)

    def export_filename(self) -> str:
        return export_filename(self.document.info.title, self.settings.fallback_name)

    def import_text(self, text: str) -> bool:
        """
        Replace the document with parsed tablature.

        Returns:
            False (document unchanged) if the text holds no tablature
        """
        try:
            document = parse_tab(text)
        except TabFormatError as e:
            logger.warning("Invalid tab file: %s", e)
            return False
        self.execute(ReplaceDocumentCommand(document, "Import"))
        return True

    def import_file(self, path: PathLike) -> bool:
        """Read and parse a tab file, then install it. IOError propagates."""
        try:
            document = TabFile.load(path)
        except TabFormatError as e:
            logger.warning("Invalid tab file %s: %s", path, e)
            return False
        self.execute(ReplaceDocumentCommand(document, "Import"))
        return True

    def export_file(self, directory: PathLike) -> Path:
        """Write the tab into a directory, named after the song title."""
        return TabFile.save(self.document, Path(directory) / self.export_filename())

    def save_project(self, path: PathLike) -> Path:
        saved = ProjectFile.save(self.document, path)
        self.app_state.mark_clean()
        return saved

    def load_project(self, path: PathLike):
        document = ProjectFile.load(path)
        self.execute(ReplaceDocumentCommand(document, "Open Project"))
        self.app_state.mark_clean()

    def auto_save(self, base_dir: Optional[PathLike] = None) -> bool:
        """Back up the document if auto-save is enabled and there are unsaved changes."""
        if not self.settings.auto_save_enabled or not self.app_state.is_dirty():
            return False
        name = self.document.info.title or "untitled"
        return ProjectFile.auto_save(self.document, name, base_dir)

    def export_midi(self, path: PathLike) -> Path:
        return MIDIConverter.export_midi(
            self.document,
            path,
            bpm=float(self.settings.get("midi", "bpm", 120)),
            steps_per_beat=int(self.settings.get("midi", "steps_per_beat", 2)),
            velocity=int(self.settings.get("midi", "velocity", 96)),
        )
