from pathlib import PurePath

PLAINTEXT = "plaintext"

# Extension -> language identifier sent along with a request.
EXTENSION_LANGUAGES = {
    ".py": "python",
    ".java": "java",
    ".js": "javascript",
    ".jsx": "jsx",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".cs": "csharp",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".kt": "kotlin",
    ".scala": "scala",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".sh": "shell",
    ".sql": "sql",
}


def language_for_filename(filename: str) -> str:
    """Resolves a language identifier from a filename, or `plaintext`."""
    suffix = PurePath(filename).suffix.lower()
    return EXTENSION_LANGUAGES.get(suffix, PLAINTEXT)
