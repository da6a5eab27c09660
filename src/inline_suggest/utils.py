import os
from pathlib import Path

# --- Centralized Path Constant ---
INLINE_SUGGEST_HOME = Path(
    os.getenv("INLINE_SUGGEST_HOME", Path.home() / ".inline_suggest")
)


def resolve_path(path_str: str) -> Path:
    """
    Resolves a path given on the command line. `home:responses/x.json` is
    read relative to INLINE_SUGGEST_HOME; anything else is user-expanded.
    """
    if path_str.startswith("home:"):
        return (INLINE_SUGGEST_HOME / path_str[len("home:") :]).resolve()
    return Path(path_str).expanduser().resolve()
