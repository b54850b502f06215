from pathlib import Path, PurePath
from typing import Iterable, Sequence, Union
import structlog

log = structlog.get_logger(__name__)

PathLike = Union[str, PurePath]

def _posix_str(path: PathLike) -> str:
    return PurePath(path).as_posix() if not isinstance(path, str) else path.replace("\\", "/")

def should_exclude(path: PathLike, patterns: Sequence[str]) -> bool:
    """
    Decides whether a path is excluded by any of the given patterns.

    Matching is plain substring matching, case-sensitive, no glob or regex:
    a pattern excludes the path when the path string starts with or contains
    it, or when any ancestor's string ends with the pattern (trailing '/'
    stripped) or contains it. An empty pattern list never excludes.
    """
    if not patterns:
        return False

    path_str = _posix_str(path)
    ancestors = [path_str] + [p.as_posix() for p in PurePath(path_str).parents]

    for pattern in patterns:
        if not pattern:
            continue
        if path_str.startswith(pattern) or pattern in path_str:
            return True
        # directory patterns like "target/" also match the bare directory "target".
        dir_name = pattern.rstrip("/")
        for ancestor_str in ancestors:
            if (dir_name and ancestor_str.endswith(dir_name)) or pattern in ancestor_str:
                return True
    return False

def normalize_extensions(extensions: Iterable[str]) -> set:
    # accepts "py", ".py" or ".PY" and returns {"py"}.
    return {ext.strip().lstrip(".") for ext in extensions if ext and ext.strip().lstrip(".")}

def has_included_extension(path: PathLike, extensions: Sequence[str]) -> bool:
    # extension allow-list; an empty list allows every file.
    if not extensions:
        return True
    suffix = PurePath(path).suffix
    return suffix[1:] in normalize_extensions(extensions)
