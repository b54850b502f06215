import hashlib
from pathlib import Path
from typing import Dict, Union
import structlog

log = structlog.get_logger(__name__)
utf8_bom = b"\xef\xbb\xbf"

UNKNOWN_LANGUAGE = "unknown"

# extension (lower-case, no dot) -> coarse language label.
EXTENSION_LANGUAGE_MAP: Dict[str, str] = {
    "rs": "rust", "js": "javascript", "ts": "typescript", "py": "python",
    "java": "java", "c": "c", "h": "c", "cpp": "cpp", "hpp": "cpp", "cc": "cpp",
    "cxx": "cpp", "go": "go", "rb": "ruby", "php": "php", "swift": "swift",
    "kt": "kotlin", "kts": "kotlin", "scala": "scala", "cs": "csharp",
    "fs": "fsharp", "fsi": "fsharp", "fsx": "fsharp", "html": "html", "css": "css",
    "scss": "scss", "sass": "scss", "json": "json", "yaml": "yaml", "yml": "yaml",
    "toml": "toml", "md": "markdown", "txt": "text", "sh": "shell", "bash": "bash",
    "zsh": "zsh", "fish": "fish", "sql": "sql", "xml": "xml", "graphql": "graphql",
    "gql": "graphql", "dockerfile": "dockerfile",
}

def strip_utf8_bom(data: bytes) -> bytes:
    # removes the utf-8 byte order mark from byte data if present.
    if data.startswith(utf8_bom):
        return data[len(utf8_bom):]
    return data

def detect_language(path: Union[str, Path]) -> str:
    # maps a file's extension to a coarse language label. never raises.
    suffix = Path(path).suffix
    if not suffix:
        return UNKNOWN_LANGUAGE
    return EXTENSION_LANGUAGE_MAP.get(suffix[1:].lower(), UNKNOWN_LANGUAGE)

def get_language_hint(extension: str | None) -> str:
    # language hint for markdown code fences; empty string when unknown.
    if not extension:
        return ""
    label = EXTENSION_LANGUAGE_MAP.get(extension.lower().strip("."), UNKNOWN_LANGUAGE)
    return "" if label == UNKNOWN_LANGUAGE else label

def feature_id_from_name(name: str) -> str:
    """Derives a stable four-digit feature id from a feature name."""
    digest = hashlib.sha256(name.encode("utf-8")).hexdigest()
    return f"{int(digest, 16) % 10000:04d}"
