"""Tests for the TabEditor controller."""
import pytest

from tabmaker.editor import TabEditor
from tabmaker.models import EMPTY_COLUMN, Note
from tabmaker.settings import Settings


@pytest.fixture
def editor(tmp_path):
    settings = Settings(tmp_path / "settings.json",
                        values={"general": {"initial_columns": 8, "undo_limit": 10}})
    return TabEditor(settings)


def frets(editor, string_index=0):
    block = editor.document.current_block
    return [c[string_index].fret if c[string_index] else None for c in block.columns]


class TestNoteEntry:

    def test_starts_with_one_empty_block(self, editor):
        doc = editor.document
        assert len(doc.blocks) == 1
        assert doc.current_block.num_columns == 8
        assert not editor.history.can_undo()

    def test_typing_two_digits(self, editor):
        editor.select_string(2)
        editor.type_digit("2")
        editor.type_digit("4")
        block = editor.document.current_block
        assert block.get_note(0, 2) == Note("24")
        assert block.cursor == 1

    def test_typing_past_max_fret_restarts(self, editor):
        editor.type_digit("2")
        editor.type_digit("5")
        assert editor.document.current_block.get_note(0, 0) == Note("5")
        assert editor.document.current_block.cursor == 0

    def test_fretboard_click_advances_and_sets_string(self, editor):
        editor.fretboard_click(4, 3)
        assert editor.active_string == 4
        assert editor.document.current_block.get_note(0, 4) == Note("3")
        assert editor.document.current_block.cursor == 1

    def test_symbol_and_delete(self, editor):
        editor.select_string(1)
        editor.add_symbol("h")
        assert editor.document.current_block.get_note(0, 1) == Note("h")
        editor.cursor_left()
        editor.delete_note()
        assert editor.document.current_block.get_note(0, 1) is None

    def test_string_navigation_clamped(self, editor):
        editor.string_up()
        assert editor.active_string == 0
        for _ in range(10):
            editor.string_down()
        assert editor.active_string == 5

    def test_cursor_right_stops_one_past_end(self, editor):
        for _ in range(20):
            editor.cursor_right()
        assert editor.document.current_block.cursor == 8
        editor.fretboard_click(0, 1)
        assert editor.document.current_block.num_columns == 9

    def test_bar_line_and_space(self, editor):
        editor.insert_bar_line()
        assert frets(editor, 3)[0] == "|"
        editor.move_cursor(0)
        editor.insert_space()
        assert editor.document.current_block.columns[0] == EMPTY_COLUMN
        assert frets(editor, 3)[1] == "|"

    def test_transpose(self, editor):
        editor.fretboard_click(0, 3)
        editor.fretboard_click(0, 0)
        editor.add_symbol("|")
        editor.transpose(-1)
        assert frets(editor)[:3] == ["2", "0", "|"]


class TestClipboard:

    def test_copy_requires_selection(self, editor):
        assert not editor.copy()
        assert not editor.cut()
        assert not editor.paste()

    def test_copy_paste(self, editor):
        editor.fretboard_click(0, 1)
        editor.fretboard_click(0, 2)
        editor.set_selection((0, 1))
        assert editor.copy()
        editor.move_cursor(8)
        assert editor.paste()
        assert frets(editor)[8:] == ["1", "2"]
        assert editor.document.current_block.cursor == 10

    def test_clipboard_survives_source_edits(self, editor):
        editor.fretboard_click(0, 5)
        editor.set_selection((0, 0))
        editor.copy()
        editor.transpose(3)
        editor.move_cursor(0)
        editor.delete_note()
        assert editor.clipboard[0][0] == Note("5")

    def test_cut_then_undo_keeps_clipboard(self, editor):
        editor.fretboard_click(0, 7)
        editor.set_selection((0, 0))
        assert editor.cut()
        assert frets(editor)[0] is None
        assert editor.document.current_block.num_columns == 8
        editor.undo()
        assert frets(editor)[0] == "7"
        assert editor.clipboard[0][0] == Note("7")

    def test_selection_does_not_create_history(self, editor):
        editor.set_selection((1, 3))
        editor.select_block(0)
        assert not editor.history.can_undo()

    def test_insert_space_at_selection(self, editor):
        editor.fretboard_click(0, 1)
        editor.fretboard_click(0, 2)
        cursor = editor.document.current_block.cursor
        editor.set_selection((1, 1))
        editor.insert_space()
        assert frets(editor)[:3] == ["1", None, "2"]
        assert editor.document.current_block.cursor == cursor


class TestBlocks:

    def test_add_duplicate_move_remove(self, editor):
        editor.set_block_title(0, "Intro")
        editor.add_block()
        editor.set_block_title(1, "Verso")
        editor.duplicate_block()
        assert [b.title for b in editor.document.blocks] == ["Intro", "Verso", "Verso (Cópia)"]
        assert editor.document.active_block == 2

        editor.move_block(2, -1)
        assert [b.title for b in editor.document.blocks] == ["Intro", "Verso (Cópia)", "Verso"]
        assert editor.document.active_block == 1

        editor.remove_block()
        assert [b.title for b in editor.document.blocks] == ["Intro", "Verso"]
        assert editor.document.active_block == 0

    def test_remove_only_block_is_noop(self, editor):
        assert not editor.remove_block()
        assert len(editor.document.blocks) == 1
        assert not editor.history.can_undo()

    def test_clear_all_resets_everything(self, editor):
        editor.set_song_info(title="Song", artist="Band")
        editor.add_block()
        editor.set_selection((0, 2))
        editor.clear_all()
        doc = editor.document
        assert len(doc.blocks) == 1
        assert doc.info.title == ""
        assert doc.selection is None
        assert doc.current_block.cursor == 0


class TestUndoRedo:

    def test_undo_all_then_redo_all(self, editor):
        initial = editor.document
        editor.fretboard_click(0, 3)
        editor.type_digit("1")
        editor.type_digit("2")
        editor.insert_bar_line()
        editor.add_block()
        editor.set_song_info(title="X")
        final = editor.document

        while editor.undo():
            pass
        assert editor.document.content_equals(initial)
        while editor.redo():
            pass
        assert editor.document.content_equals(final)

    def test_history_depth_from_settings(self, editor):
        for _ in range(15):
            editor.insert_bar_line()
        assert editor.history.undo_depth == 10


class TestImportExport:

    def test_export_import_round_trip(self, editor):
        editor.set_song_info(title="Asa Branca", artist="Luiz Gonzaga")
        editor.fretboard_click(0, 3)
        editor.add_block()
        editor.set_block_title(1, "Refrão")
        editor.fretboard_click(5, 12)

        text = editor.export_text()
        other = TabEditor(editor.settings)
        assert other.import_text(text)
        doc = other.document
        assert len(doc.blocks) == 2
        assert doc.info.artist == "Luiz Gonzaga"
        assert doc.blocks[0].get_note(0, 0) == Note("3")
        assert doc.blocks[1].get_note(0, 5) == Note("12")
        assert doc.blocks[1].title == "Refrão"
        assert [b.num_columns for b in doc.blocks] == [8, 8]

    def test_invalid_import_leaves_document(self, editor, caplog):
        editor.fretboard_click(0, 3)
        before = editor.document
        assert not editor.import_text("nothing to see here")
        assert editor.document is before
        assert "Invalid tab file" in caplog.text

    def test_import_is_undoable(self, editor):
        editor.fretboard_click(0, 3)
        text = editor.export_text()
        editor.clear_all()
        editor.import_text(text)
        editor.undo()
        assert editor.document.current_block.get_note(0, 0) is None

    def test_export_file_named_after_title(self, editor, tmp_path):
        editor.set_song_info(title="My Song")
        path = editor.export_file(tmp_path)
        assert path.name == "my_song.txt"
        assert editor.import_file(path)

    def test_export_filename_fallback(self, editor):
        assert editor.export_filename() == "hunter_tab.txt"

    def test_import_invalid_file(self, editor, tmp_path):
        path = tmp_path / "x.txt"
        path.write_text("hello")
        assert not editor.import_file(path)

    def test_project_save_load(self, editor, tmp_path):
        editor.fretboard_click(2, 9)
        path = editor.save_project(tmp_path / "proj")
        assert not editor.app_state.is_dirty()
        ids = editor.document.block_ids()

        other = TabEditor(editor.settings)
        other.load_project(path)
        assert other.document.block_ids() == ids
        assert other.document.current_block.get_note(0, 2) == Note("9")

    def test_auto_save_only_when_dirty(self, editor, tmp_path):
        assert not editor.auto_save(tmp_path)
        editor.fretboard_click(0, 1)
        assert editor.auto_save(tmp_path)
        assert (tmp_path / "autosave" / "untitled.htab").exists()

    def test_export_midi(self, editor, tmp_path):
        editor.fretboard_click(0, 0)
        path = editor.export_midi(tmp_path / "out")
        assert path.exists()
        assert path.suffix == ".mid"
