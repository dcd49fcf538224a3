"""
Lesson Library Module.

Loading, parsing and validation of the published lesson library.
"""

from quizgrade.library.loader import LibraryLoader, LibraryLoadError, load_library
from quizgrade.library.parser import LibraryParseError, LibraryParser, parse_option_lines
from quizgrade.library.validator import LibraryValidationError, LibraryValidator

__all__ = [
    "LibraryLoader",
    "LibraryLoadError",
    "LibraryParseError",
    "LibraryParser",
    "LibraryValidationError",
    "LibraryValidator",
    "load_library",
    "parse_option_lines",
]
