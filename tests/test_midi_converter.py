"""Tests for MIDI export."""
import mido
import pytest

from tabmaker.constants import NUM_STRINGS
from tabmaker.midi_converter import MIDIConverter
from tabmaker.models import Block, Document, EMPTY_COLUMN, Note, SongInfo


def column_with(**cells):
    column = [None] * NUM_STRINGS
    for key, label in cells.items():
        column[int(key[1:])] = Note(label)
    return tuple(column)


def note_ons(mid):
    """(absolute tick, note) of every note_on."""
    result = []
    tick = 0
    for msg in mid.tracks[0]:
        tick += msg.time
        if msg.type == "note_on":
            result.append((tick, msg.note))
    return result


class TestBlockEvents:

    def test_columns_are_steps(self):
        block = Block(columns=(column_with(s0="0"), EMPTY_COLUMN, column_with(s5="3")))
        notes, length = MIDIConverter.block_events(block, 240)
        assert notes == [(0, 240, 64), (480, 720, 43)]
        assert length == 720

    def test_bar_lines_take_no_time_and_techniques_are_silent(self):
        bar = (Note("|"),) * NUM_STRINGS
        block = Block(columns=(column_with(s1="1"), bar, column_with(s2="h", s3="2")))
        notes, length = MIDIConverter.block_events(block, 100)
        assert notes == [(0, 100, 60), (100, 200, 52)]
        assert length == 200

    def test_out_of_midi_range_skipped(self):
        block = Block(columns=(column_with(s0="99"),))
        notes, _ = MIDIConverter.block_events(block, 100)
        assert notes == []


class TestExport:

    def test_parts_follow_each_other(self):
        doc = Document(
            blocks=(
                Block(columns=(column_with(s0="0"), column_with(s0="2")), title="Intro"),
                Block(columns=(column_with(s5="0"),)),
            ),
            info=SongInfo(title="Song"),
        )
        mid = MIDIConverter.to_midi_file(doc, bpm=100, steps_per_beat=2)
        assert mid.ticks_per_beat == 480
        assert note_ons(mid) == [(0, 64), (240, 66), (480, 40)]

        markers = [msg.text for msg in mid.tracks[0] if msg.type == "marker"]
        assert markers == ["Parte 1: Intro", "Parte 2"]
        tempo = next(msg.tempo for msg in mid.tracks[0] if msg.type == "set_tempo")
        assert tempo == mido.bpm2tempo(100)

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            MIDIConverter.to_midi_file(Document(), steps_per_beat=0)
        with pytest.raises(ValueError):
            MIDIConverter.to_midi_file(Document(), velocity=0)

    def test_export_writes_file(self, tmp_path):
        doc = Document(blocks=(Block(columns=(column_with(s0="5"),)),))
        path = MIDIConverter.export_midi(doc, tmp_path / "song.txt")
        assert path.suffix == ".mid"
        loaded = mido.MidiFile(path)
        assert note_ons(loaded) == [(0, 69)]
