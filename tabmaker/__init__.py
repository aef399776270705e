"""
Document model for Hunter Tab Maker.

Modules:
- constants: Guitar constants (string names, fret range, techniques)
- models: Immutable data structures (Note, Block, Document) and AppState
- note_input: Digit combination and cursor-advance rules for note entry
- block_ops / document_ops: Pure editing operations
- commands: Command pattern with snapshot undo/redo
- tab_format: Plain-text tab export/import
- persistence: Tab and project file I/O (.txt, .htab)
- midi_converter: MIDI file export
- settings: User settings (~/.tabmaker/settings.json)
- editor: TabEditor controller
"""
