"""
File I/O for tablature documents.

Formats:
- .txt: plain-text tab (see tab_format), for sharing and printing
- .htab: MessagePack project file (document dictionary + version),
  keeps block ids and cursors
"""
import logging
import re
from pathlib import Path
from typing import Optional, Union

import msgpack

from tabmaker.constants import (
    TAB_EXTENSION, PROJECT_EXTENSION, FALLBACK_EXPORT_NAME,
)
from tabmaker.models import Document
from tabmaker.tab_format import export_tab, parse_tab

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def export_filename(title: str, fallback: str = FALLBACK_EXPORT_NAME) -> str:
    """
    Derive a file name from the song title.

    Characters other than ASCII letters and digits become '_' and the
    result is lowercased.

    Example:
        >>> export_filename("Stairway To Heaven")
        'stairway_to_heaven.txt'
        >>> export_filename("")
        'hunter_tab.txt'
    """
    sanitized = re.sub(r"[^A-Za-z0-9]", "_", title.strip()).lower()
    return f"{sanitized or fallback}{TAB_EXTENSION}"


def decode_text(data: bytes) -> str:
    """Decode file contents as UTF-8, falling back to Latin-1 for locally-encoded files."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info("File is not UTF-8, reading as Latin-1")
        return data.decode("latin-1")


class TabFile:
    """Handles plain-text tab file I/O."""

    @staticmethod
    def save(document: Document, path: PathLike) -> Path:
        """
        Export document to a text tab file.

        Args:
            document: Document to export
            path: Destination file, or a directory to receive a file named
                  after the song title

        Returns:
            Path written

        Raises:
            IOError: If save fails
        """
        path = Path(path)
        if path.is_dir():
            path = path / export_filename(document.info.title)

        # Build the whole file before touching the disk
        text = export_tab(document)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise IOError(f"Failed to export tab to {path}: {e}") from e

        logger.info("Exported %d parts to %s", len(document.blocks), path)
        return path

    @staticmethod
    def load(path: PathLike) -> Document:
        """
        Import a text tab file.

        Args:
            path: Source file path

        Returns:
            Parsed document

        Raises:
            IOError: If the file cannot be read
            TabFormatError: If the file contains no tablature
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise IOError(f"Failed to read tab from {path}: {e}") from e

        document = parse_tab(decode_text(data))
        logger.info("Imported %d parts from %s", len(document.blocks), path)
        return document


class ProjectFile:
    """Handles .htab project file I/O."""

    @staticmethod
    def save(document: Document, path: PathLike) -> Path:
        """
        Save document to .htab file.

        Args:
            document: Document to save
            path: Destination file path

        Returns:
            Path written (extension enforced)

        Raises:
            IOError: If save fails
        """
        path = Path(path)
        # Ensure .htab extension
        if path.suffix != PROJECT_EXTENSION:
            path = path.with_suffix(PROJECT_EXTENSION)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            packed_data = msgpack.packb(document.to_dict(), use_bin_type=True)
            with open(path, "wb") as f:
                f.write(packed_data)
        except (OSError, TypeError, ValueError) as e:
            raise IOError(f"Failed to save project to {path}: {e}") from e

        logger.info("Saved project to %s", path)
        return path

    @staticmethod
    def load(path: PathLike) -> Document:
        """
        Load document from .htab file.

        Args:
            path: Source file path

        Returns:
            Loaded document

        Raises:
            IOError: If load fails
            ValueError: If file format invalid
        """
        path = Path(path)
        if not path.exists():
            raise IOError(f"Project file not found: {path}")

        try:
            with open(path, "rb") as f:
                packed_data = f.read()
            data = msgpack.unpackb(packed_data, raw=False)
        except OSError as e:
            raise IOError(f"Failed to load project from {path}: {e}") from e
        except (msgpack.exceptions.ExtraData, msgpack.exceptions.UnpackException, ValueError) as e:
            raise ValueError(f"Invalid {PROJECT_EXTENSION} file format: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Invalid {PROJECT_EXTENSION} file format: not a document")

        # Validate version
        version = str(data.get("version", "unknown"))
        if not version.startswith("1."):
            raise ValueError(f"Incompatible project version: {version}. Expected 1.x")

        try:
            document = Document.from_dict(data)
        except (TypeError, KeyError, AttributeError, ValueError) as e:
            raise ValueError(f"Invalid {PROJECT_EXTENSION} file format: {e}") from e
        logger.info("Loaded project from %s", path)
        return document

    @staticmethod
    def auto_save(document: Document, project_name: str, base_dir: Optional[PathLike] = None) -> bool:
        """
        Auto-save document to a backup location.

        Failures are logged, never raised.

        Returns:
            True if the backup was written
        """
        try:
            ProjectFile.save(document, ProjectFile.get_auto_save_path(project_name, base_dir))
        except IOError as e:
            logger.warning("Auto-save failed: %s", e)
            return False
        return True

    @staticmethod
    def get_auto_save_path(project_name: str, base_dir: Optional[PathLike] = None) -> Path:
        """
        Get path to auto-save file for a project.

        Args:
            project_name: Project name
            base_dir: Settings directory (default ~/.tabmaker)

        Returns:
            Path to auto-save file
        """
        base = Path(base_dir) if base_dir is not None else Path.home() / ".tabmaker"
        auto_save_dir = base / "autosave"

        # Sanitize project name for file system
        safe_name = "".join(c for c in project_name if c.isalnum() or c in (' ', '-', '_')).strip()
        if not safe_name:
            safe_name = "untitled"

        return auto_save_dir / f"{safe_name}{PROJECT_EXTENSION}"

    @staticmethod
    def has_auto_save(project_name: str, base_dir: Optional[PathLike] = None) -> bool:
        """Check if auto-save file exists for a project."""
        return ProjectFile.get_auto_save_path(project_name, base_dir).exists()
