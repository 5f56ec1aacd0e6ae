"""
Keyword Extraction
==================

This module turns file paths and file contents into normalized keyword lists
used to look up related tasks.

Each supported file type has a candidate extractor that returns raw strings.
All candidates then go through the same normalize/filter/dedupe stage, so the
only per-language difference is the regular expressions used to find them.

Functions:
    extract_from_path: Keywords from a file path
    extract_from_content: Keywords from file content, dispatched on extension
    extract: Union of path and content keywords
"""

import posixpath
import re
from collections.abc import Callable, Iterable

MIN_KEYWORD_LENGTH = 3

ENGLISH_STOP_WORDS = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "had", "was",
    "one", "our", "out", "day", "get", "has", "her", "his", "how", "its", "new",
    "now", "old", "see", "two", "way", "who", "boy", "did", "man", "may", "she",
    "use", "your", "said", "each", "make", "most", "over", "such", "time", "very",
    "what", "with", "have", "from", "they", "know", "want", "been", "good", "much",
    "some", "than", "them", "well", "were",
})

SCRIPT_STOP_WORDS = frozenset({
    "function", "return", "const", "var", "let", "if", "else", "for", "while",
    "do", "try", "catch", "throw", "new", "this", "super", "extends",
    "implements", "interface", "type", "export", "import", "default", "async",
    "await",
})

PHP_STOP_WORDS = frozenset({
    "public", "private", "protected", "static", "final", "abstract", "class",
    "namespace", "use",
})

PYTHON_STOP_WORDS = frozenset({
    "def", "class", "import", "from", "as", "if", "else", "elif", "for", "while",
    "try", "except", "finally", "with", "lambda", "yield", "return",
})

PROJECT_STOP_WORDS = frozenset({
    "index", "main", "app", "src", "test", "tests", "lib", "libs", "config",
    "dist", "build", "node", "modules",
})

STOP_WORDS = (
    ENGLISH_STOP_WORDS
    | SCRIPT_STOP_WORDS
    | PHP_STOP_WORDS
    | PYTHON_STOP_WORDS
    | PROJECT_STOP_WORDS
)

_EXTENSION = re.compile(r"\.[^/.]+$")
_CASE_BOUNDARY = re.compile(r"(?=[A-Z])")
_WORD_SEPARATORS = re.compile(r"[-_]")
_PATH_SEPARATORS = re.compile(r"[\\/]")

_SCRIPT_DECLARATION = re.compile(r"(?:function\s+|const\s+|let\s+|var\s+)(\w+)")
_CLASS_DECLARATION = re.compile(r"class\s+(\w+)")
_SCRIPT_IMPORT = re.compile(r"import.*from\s+['\"]([^'\"]+)['\"]")
_PHP_FUNCTION = re.compile(r"function\s+(\w+)")
_PHP_NAMESPACE = re.compile(r"namespace\s+([\w\\]+)")
_PYTHON_FUNCTION = re.compile(r"def\s+(\w+)")
_MARKDOWN_HEADING = re.compile(r"#{1,6}\s+(.+)")
_MARKDOWN_CHECKLIST = re.compile(r"[-*]\s+\[.\]\s+(.+)")
_CAPITALIZED_WORD = re.compile(r"\b[A-Z][a-zA-Z]+\b")

Extractor = Callable[[str], list[str]]


def is_stop_word(word: str) -> bool:
    """Check if a word is too common to identify a task."""
    return word.lower() in STOP_WORDS


def normalize_keywords(candidates: Iterable[str]) -> list[str]:
    """
    Normalize, filter and deduplicate raw keyword candidates.

    Candidates are lowercased and trimmed, anything shorter than
    ``MIN_KEYWORD_LENGTH`` or listed in ``STOP_WORDS`` is dropped, and
    duplicates are removed keeping the first occurrence.

    Args:
        candidates: Raw candidate strings in discovery order

    Returns:
        list[str]: Keywords in first-seen order, without duplicates
    """
    keywords: dict[str, None] = {}
    for candidate in candidates:
        keyword = candidate.lower().strip()
        if len(keyword) < MIN_KEYWORD_LENGTH or keyword in STOP_WORDS:
            continue
        keywords.setdefault(keyword, None)
    return list(keywords)


def strip_extension(filename: str) -> str:
    """Remove the last extension of a file name, if it has one."""
    return _EXTENSION.sub("", filename)


def _split_path(path: str) -> tuple[list[str], str]:
    parts = _PATH_SEPARATORS.split(path)
    return parts[:-1], parts[-1]


def path_candidates(path: str) -> list[str]:
    """
    Collect raw keyword candidates from a file path.

    The file name without extension comes first, followed by its camel case
    pieces, its ``-``/``_`` pieces and finally the directory names.
    """
    if not path:
        return []

    directories, filename = _split_path(path)
    stem = strip_extension(filename)

    candidates = [stem]
    candidates.extend(piece for piece in _CASE_BOUNDARY.split(stem) if piece)
    candidates.extend(piece for piece in _WORD_SEPARATORS.split(stem) if piece)
    candidates.extend(
        directory for directory in directories if directory and directory != "."
    )
    return candidates


def script_candidates(content: str) -> list[str]:
    """Declared identifiers, class names and imported module names."""
    candidates = _SCRIPT_DECLARATION.findall(content)
    candidates.extend(_CLASS_DECLARATION.findall(content))
    for module in _SCRIPT_IMPORT.findall(content):
        candidates.append(posixpath.splitext(posixpath.basename(module))[0])
    return candidates


def php_candidates(content: str) -> list[str]:
    candidates = _CLASS_DECLARATION.findall(content)
    candidates.extend(_PHP_FUNCTION.findall(content))
    candidates.extend(
        namespace.split("\\")[-1] for namespace in _PHP_NAMESPACE.findall(content)
    )
    return candidates


def python_candidates(content: str) -> list[str]:
    return _CLASS_DECLARATION.findall(content) + _PYTHON_FUNCTION.findall(content)


def markdown_candidates(content: str) -> list[str]:
    """Heading texts and checklist item texts."""
    headings = [heading.strip() for heading in _MARKDOWN_HEADING.findall(content)]
    items = [item.strip() for item in _MARKDOWN_CHECKLIST.findall(content)]
    return headings + items


def generic_candidates(content: str) -> list[str]:
    """Capitalized words longer than three characters."""
    return [word for word in _CAPITALIZED_WORD.findall(content) if len(word) > 3]


EXTRACTORS: dict[str, Extractor] = {
    ".js": script_candidates,
    ".ts": script_candidates,
    ".jsx": script_candidates,
    ".tsx": script_candidates,
    ".php": php_candidates,
    ".py": python_candidates,
    ".md": markdown_candidates,
}


def file_extension(path: str) -> str:
    """Lowercased extension of the final path segment, including the dot."""
    _, filename = _split_path(path)
    return posixpath.splitext(filename)[1].lower()


def get_extractor(path: str) -> Extractor:
    return EXTRACTORS.get(file_extension(path), generic_candidates)


def extract_from_path(path: str) -> list[str]:
    """
    Extract keywords from a file path.

    Args:
        path: Relative or absolute file path, with or without extension

    Returns:
        list[str]: Normalized keywords, e.g. ``src/controllers/PaymentController.js``
            gives ``paymentcontroller``, ``payment``, ``controller``,
            ``controllers``
    """
    return normalize_keywords(path_candidates(path))


def extract_from_content(content: str, path: str) -> list[str]:
    """
    Extract keywords from file content.

    The extractor is chosen from the extension of ``path``; unknown
    extensions use the capitalized-word heuristic.

    Args:
        content: Text of the file
        path: Path of the file, only used to pick the extractor

    Returns:
        list[str]: Normalized keywords
    """
    if not content:
        return []
    return normalize_keywords(get_extractor(path)(content))


def extract(path: str, content: str | None = None) -> list[str]:
    """Path keywords followed by any new content keywords."""
    candidates = path_candidates(path)
    if content:
        candidates.extend(get_extractor(path)(content))
    return normalize_keywords(candidates)
