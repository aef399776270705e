"""
Hunter Tab Maker - command-line front end
Main entry point
"""
import argparse
import logging
import sys
from pathlib import Path

from tabmaker.editor import TabEditor
from tabmaker.models import NoteKind
from tabmaker.settings import Settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tabmaker", description="Hunter Tab Maker tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--settings", type=Path, default=None,
                        help="settings file (default ~/.tabmaker/settings.json)")
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="summarize a tab file")
    info.add_argument("source", type=Path)

    normalize = sub.add_parser("normalize", help="re-export a tab file in canonical form")
    normalize.add_argument("source", type=Path)
    normalize.add_argument("-o", "--output", type=Path, default=None,
                           help="output file or directory (default: stdout)")

    transpose = sub.add_parser("transpose", help="shift every fret")
    transpose.add_argument("source", type=Path)
    transpose.add_argument("delta", type=int)
    transpose.add_argument("-o", "--output", type=Path, default=None)

    to_midi = sub.add_parser("to-midi", help="export a tab file as MIDI")
    to_midi.add_argument("source", type=Path)
    to_midi.add_argument("output", type=Path)

    to_project = sub.add_parser("to-project", help="convert a tab file to a .htab project")
    to_project.add_argument("source", type=Path)
    to_project.add_argument("output", type=Path)

    return parser


def _print_info(editor: TabEditor):
    doc = editor.document
    print(f"Title:  {doc.info.title or '-'}")
    print(f"Artist: {doc.info.artist or '-'}")
    for number, block in enumerate(doc.blocks, start=1):
        frets = sum(
            1 for column in block.columns for cell in column
            if cell is not None and cell.kind is NoteKind.FRET
        )
        title = f" ({block.title})" if block.title else ""
        print(f"Parte {number}{title}: {block.num_columns} columns, {frets} frets")


def _write_text(editor: TabEditor, output):
    if output is None:
        sys.stdout.write(editor.export_text())
    elif output.is_dir():
        print(f"Wrote {editor.export_file(output)}")
    else:
        output.write_text(editor.export_text(), encoding="utf-8")
        print(f"Wrote {output}")


def main(argv=None) -> int:
    """Run the command line tool."""
    args = build_parser().parse_args(argv)

    # Log to stderr so stdout can carry tab output
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    editor = TabEditor(Settings.load(args.settings))
    try:
        if not editor.import_file(args.source):
            print(f"No tablature found in {args.source}", file=sys.stderr)
            return 1
    except IOError as e:
        print(e, file=sys.stderr)
        return 1

    if args.command == "info":
        _print_info(editor)
    elif args.command == "normalize":
        _write_text(editor, args.output)
    elif args.command == "transpose":
        editor.transpose(args.delta)
        _write_text(editor, args.output)
    elif args.command == "to-midi":
        print(f"Wrote {editor.export_midi(args.output)}")
    elif args.command == "to-project":
        print(f"Wrote {editor.save_project(args.output)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
