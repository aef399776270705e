"""
MIDI file export for tablature documents.

Each grid column is one rhythmic step. Fretted cells sound in standard
tuning; bar-line columns take no time and technique symbols are silent.
Every part gets a marker meta event so DAWs show the song structure.
"""
import logging
from pathlib import Path
from typing import List, Tuple, Union

import mido

from tabmaker.constants import NUM_STRINGS, PART_MARKER, fret_to_midi
from tabmaker.models import Block, Document, NoteKind

logger = logging.getLogger(__name__)


class MIDIConverter:
    """Handles MIDI file export."""

    TPQN = 480  # Ticks per quarter note

    @classmethod
    def block_events(cls, block: Block, step_ticks: int) -> Tuple[List[Tuple[int, int, int]], int]:
        """
        Collect sounding notes of a block.

        Args:
            block: Block to convert
            step_ticks: Length of one column in ticks

        Returns:
            ([(start_tick, end_tick, midi_note), ...], block length in ticks)
            Ticks are relative to the start of the block.
        """
        notes = []
        tick = 0
        for column in block.columns:
            if all(cell is not None and cell.kind is NoteKind.BAR_LINE for cell in column):
                continue
            for s in range(NUM_STRINGS):
                cell = column[s]
                if cell is None or cell.kind is not NoteKind.FRET:
                    continue
                pitch = fret_to_midi(s, cell.fret_number)
                if pitch <= 127:
                    notes.append((tick, tick + step_ticks, pitch))
            tick += step_ticks
        return notes, tick

    @classmethod
    def to_midi_file(cls, document: Document, bpm: float = 120.0,
                     steps_per_beat: int = 2, velocity: int = 96) -> mido.MidiFile:
        """
        Build a single-track MIDI file from a document.

        Args:
            document: Document to convert
            bpm: Tempo
            steps_per_beat: Columns per quarter note (2 = eighth notes)
            velocity: Note-on velocity (1-127)
        """
        if steps_per_beat <= 0:
            raise ValueError(f"Steps per beat must be positive, got {steps_per_beat}")
        if not 1 <= velocity <= 127:
            raise ValueError(f"Velocity must be 1-127, got {velocity}")

        step_ticks = cls.TPQN // steps_per_beat
        mid = mido.MidiFile(ticks_per_beat=cls.TPQN)
        track = mido.MidiTrack()
        mid.tracks.append(track)

        track.append(mido.MetaMessage('track_name', name=document.info.title or "Tab", time=0))
        track.append(mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(bpm), time=0))
        track.append(mido.MetaMessage('time_signature', numerator=4, denominator=4, time=0))

        # (absolute tick, order, message): note_off before note_on at the same tick
        events = []
        offset = 0
        for number, block in enumerate(document.blocks, start=1):
            label = f"{PART_MARKER} {number}"
            if block.title:
                label = f"{label}: {block.title}"
            events.append((offset, 0, mido.MetaMessage('marker', text=label)))

            notes, length = cls.block_events(block, step_ticks)
            for start, end, pitch in notes:
                events.append((offset + start, 2, mido.Message(
                    'note_on', note=pitch, velocity=velocity, channel=0)))
                events.append((offset + end, 1, mido.Message(
                    'note_off', note=pitch, velocity=0, channel=0)))
            offset += length

        # Sort by time
        events.sort(key=lambda e: (e[0], e[1]))

        # Convert absolute time to delta time
        prev_tick = 0
        for abs_tick, _, msg in events:
            msg.time = abs_tick - prev_tick
            track.append(msg)
            prev_tick = abs_tick

        # End of track
        track.append(mido.MetaMessage('end_of_track', time=0))
        return mid

    @classmethod
    def export_midi(cls, document: Document, path: Union[str, Path], bpm: float = 120.0,
                    steps_per_beat: int = 2, velocity: int = 96) -> Path:
        """
        Export document to a Standard MIDI File.

        Returns:
            Path written (.mid extension enforced)
        """
        path = Path(path)
        # Ensure .mid extension
        if path.suffix != '.mid':
            path = path.with_suffix('.mid')

        mid = cls.to_midi_file(document, bpm, steps_per_beat, velocity)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            mid.save(path)
        except OSError as e:
            raise IOError(f"Failed to export MIDI to {path}: {e}") from e

        logger.info("Exported MIDI to %s", path)
        return path
