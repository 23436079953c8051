"""
Language classification by file extension.

The language tag only annotates oracle requests and filters discovery
candidates; nothing here inspects file contents.

editwise/src/editwise/languages.py
"""

from pathlib import Path
from typing import Union

__all__ = [
    "CODE_EXTENSIONS",
    "EXTENSION_LANGUAGES",
    "FALLBACK_LANGUAGE",
    "language_for_extension",
    "language_for_path",
    "is_code_file",
]

FALLBACK_LANGUAGE = "text"

EXTENSION_LANGUAGES = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".java": "java",
    ".cpp": "cpp",
    ".c": "c",
    ".go": "go",
    ".rs": "rust",
    ".php": "php",
    ".rb": "ruby",
    ".cs": "csharp",
    ".swift": "swift",
    ".kt": "kotlin",
    ".scala": "scala",
    ".sh": "bash",
    ".md": "markdown",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".sass": "sass",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".xml": "xml",
}

# Extensions picked up by directory discovery. Markup and config formats are
# classifiable but only analyzed when named explicitly.
CODE_EXTENSIONS = frozenset(
    {
        ".ts",
        ".js",
        ".tsx",
        ".jsx",
        ".py",
        ".java",
        ".cpp",
        ".c",
        ".cs",
        ".go",
        ".rs",
        ".php",
        ".rb",
    }
)


def language_for_extension(extension: str) -> str:
    """Map an extension such as ``.PY`` or ``.ts`` to a language tag."""
    return EXTENSION_LANGUAGES.get(extension.lower(), FALLBACK_LANGUAGE)


def language_for_path(path: Union[str, Path]) -> str:
    return language_for_extension(Path(path).suffix)


def is_code_file(path: Path) -> bool:
    """Check whether discovery should pick up this file by its suffix."""
    return path.suffix in CODE_EXTENSIONS
