# repoprompt/core/context_builder.py
"""
Builds a size-capped snapshot of a repository for prompt rendering.

The assembler walks the tree, drops excluded paths and files outside the
extension allow-list, reads each candidate under a size limit and records
(path, content, language) until `max_files` files have been accepted.
"""
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
import structlog

from repoprompt.config.settings import (
    DEFAULT_EXCLUDE_PATTERNS, DEFAULT_MAX_FILE_SIZE, DEFAULT_MAX_FILES, RepositorySettings,
)
from repoprompt.core.discovery import walk_directory, should_exclude, has_included_extension
from repoprompt.core.processing import read_bounded
from repoprompt.exceptions import FileSkipError, InvalidRootError
from repoprompt.util import detect_language

log = structlog.get_logger(__name__)

@dataclass(frozen=True)
class FileRecord:
    path: Path  # relative to the repository root
    content: str
    language: str

@dataclass(frozen=True)
class RepositoryContext:
    repository_path: Path
    branch: str
    files: Tuple[FileRecord, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def with_metadata(self, **annotations: Any) -> "RepositoryContext":
        # contexts are immutable; annotating returns a copy.
        merged = dict(self.metadata)
        merged.update(annotations)
        return replace(self, metadata=merged)

    def to_file_contexts(self) -> List["FileContext"]:
        from repoprompt.core.templating.context_builder import FileContext
        return [FileContext(path=rec.path.as_posix(), content=rec.content, language=rec.language) for rec in self.files]

@dataclass
class ContextBuilderConfig:
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_files: int = DEFAULT_MAX_FILES
    include_extensions: List[str] = field(default_factory=list)
    follow_symlinks: bool = False

    @classmethod
    def from_settings(cls, settings: RepositorySettings) -> "ContextBuilderConfig":
        return cls(
            exclude_patterns=list(settings.exclude_patterns),
            max_file_size=settings.max_file_size,
            max_files=settings.max_files,
            include_extensions=list(settings.include_extensions),
            follow_symlinks=settings.follow_symlinks,
        )

def _relative_to_root(file_path: Path, root: Path) -> Path:
    try:
        return file_path.relative_to(root)
    except ValueError:
        return file_path

def build_context(
    repo_path: Union[str, Path],
    branch: str,
    config: Optional[ContextBuilderConfig] = None,
) -> RepositoryContext:
    """
    Scans `repo_path` and returns a RepositoryContext.

    Raises InvalidRootError if the root is missing or not a directory and
    WalkError if a directory cannot be listed. Files that are too large or
    not utf-8 are skipped and do not count toward `max_files`.
    """
    config = config or ContextBuilderConfig()
    root = Path(repo_path)
    log.info("building_repository_context", root=str(root), branch=branch, max_files=config.max_files)

    if not root.exists():
        raise InvalidRootError(f"repository path does not exist: {root}")
    if not root.is_dir():
        raise InvalidRootError(f"repository path is not a directory: {root}")

    candidates = walk_directory(root, follow_symlinks=config.follow_symlinks)
    records: List[FileRecord] = []
    skipped: Dict[str, int] = {"excluded": 0, "extension": 0, "unreadable": 0}

    for file_path in candidates:
        if len(records) >= config.max_files:
            log.debug("max_files_reached", max_files=config.max_files)
            break

        if file_path.is_dir():
            continue

        relative_path = _relative_to_root(file_path, root)

        if should_exclude(relative_path, config.exclude_patterns):
            skipped["excluded"] += 1
            continue

        if not has_included_extension(relative_path, config.include_extensions):
            skipped["extension"] += 1
            continue

        try:
            content = read_bounded(file_path, config.max_file_size)
        except FileSkipError as e:
            log.debug("file_skipped", path=str(relative_path), reason=str(e))
            skipped["unreadable"] += 1
            continue

        records.append(FileRecord(path=relative_path, content=content, language=detect_language(file_path)))

    log.info("repository_context_built", root=str(root), branch=branch, file_count=len(records), **skipped)
    return RepositoryContext(repository_path=root, branch=branch, files=tuple(records), metadata={})

def build_minimal_context(repo_path: Union[str, Path], branch: str) -> RepositoryContext:
    # repository identity only, no scanning.
    log.info("building_minimal_repository_context", root=str(repo_path), branch=branch)
    return RepositoryContext(repository_path=Path(repo_path), branch=branch, files=(), metadata={})
