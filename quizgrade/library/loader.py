"""
Library file loader.

Reads the published library JSON from disk with encoding fallback and
a size guard, then hands the text to LibraryParser.
"""

import logging
from pathlib import Path
from typing import ClassVar

from quizgrade.config import Settings, get_settings
from quizgrade.library.parser import LibraryParser
from quizgrade.models import Library

logger = logging.getLogger(__name__)


class LibraryLoadError(Exception):
    """
    Raised when the library file cannot be read.

    Parsing problems are reported separately as LibraryParseError.
    """

    def __init__(self, message: str, file_path: str | Path, cause: Exception | None = None):
        self.file_path = str(file_path)
        self.cause = cause
        super().__init__(f"Failed to load '{file_path}': {message}")


class LibraryLoader:
    """Loads Library models from JSON files."""

    # utf-8-sig also reads plain utf-8 and strips a BOM
    ENCODING: ClassVar[str] = "utf-8-sig"
    FALLBACK_ENCODING: ClassVar[str] = "latin-1"

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()
        self._parser = LibraryParser(default_take_mode=self._settings.default_take_mode)

    def load(self, file_path: Path | str | None = None) -> Library:
        """
        Load and parse a library file.

        Args:
            file_path: Path to the JSON file. Defaults to ``settings.library_path``.

        Returns:
            The parsed Library.

        Raises:
            LibraryLoadError: If the file is missing, too large or unreadable.
            LibraryParseError: If the content is not a valid library.
        """
        path = Path(file_path) if file_path is not None else self._settings.library_path
        self._validate_file(path)

        content = self._read_with_encoding_fallback(path)
        library = self._parser.parse_json(content)

        logger.info(
            "Loaded library '%s' from %s: %d lessons, %d questions",
            library.app_name,
            path,
            len(library.lessons),
            library.question_count,
        )
        return library

    def _validate_file(self, file_path: Path) -> None:
        if not file_path.exists():
            raise LibraryLoadError("File does not exist", file_path)

        if not file_path.is_file():
            raise LibraryLoadError("Path is not a file", file_path)

        size_mb = file_path.stat().st_size / (1024 * 1024)
        if size_mb > self._settings.max_library_size_mb:
            raise LibraryLoadError(
                f"File is {size_mb:.2f} MB, limit is {self._settings.max_library_size_mb} MB",
                file_path,
            )

    def _read_with_encoding_fallback(self, file_path: Path) -> str:
        try:
            raw = file_path.read_bytes()
        except OSError as e:
            raise LibraryLoadError(f"Could not read file: {e}", file_path, cause=e) from e

        try:
            content = raw.decode(self.ENCODING)
        except UnicodeDecodeError:
            # latin-1 maps every byte, so this always succeeds
            logger.debug(
                "%s is not %s, falling back to %s",
                file_path,
                self.ENCODING,
                self.FALLBACK_ENCODING,
            )
            return raw.decode(self.FALLBACK_ENCODING)

        logger.debug("Read %s as %s", file_path, self.ENCODING)
        return content


def load_library(file_path: Path | str | None = None, settings: Settings | None = None) -> Library:
    """
    Load a library file.

    Convenience function that creates a LibraryLoader and loads in one step.
    """
    return LibraryLoader(settings).load(file_path)
