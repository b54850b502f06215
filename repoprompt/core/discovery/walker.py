import os
from pathlib import Path
from typing import List, Set
import structlog

from repoprompt.exceptions import WalkError

log = structlog.get_logger(__name__)

def walk_directory(root: Path, follow_symlinks: bool = False) -> List[Path]:
    """
    Lists every file under `root` using an explicit stack instead of recursion.

    Directories are pushed back onto the stack and expanded later; everything
    else is collected. Each file appears exactly once. A directory that cannot
    be listed aborts the whole walk with WalkError.

    Symlinked directories are not expanded unless `follow_symlinks` is set; when
    they are, each directory's real path is expanded at most once so link
    cycles terminate.
    """
    root = Path(root)
    files: List[Path] = []
    stack: List[Path] = [root]
    expanded_real_paths: Set[str] = set()

    while stack:
        current_dir = stack.pop()

        if follow_symlinks:
            real_path = os.path.realpath(current_dir)
            if real_path in expanded_real_paths:
                log.debug("walker_skipping_already_expanded_directory", path=str(current_dir), real_path=real_path)
                continue
            expanded_real_paths.add(real_path)

        try:
            with os.scandir(current_dir) as dir_entries:
                entries = list(dir_entries)
        except OSError as e:
            log.error("walker_failed_to_list_directory", path=str(current_dir), error=str(e))
            raise WalkError(f"failed to read directory {current_dir}: {e}") from e

        for entry in entries:
            entry_path = current_dir / entry.name
            try:
                is_dir = entry.is_dir(follow_symlinks=follow_symlinks)
            except OSError:
                is_dir = False
            if is_dir:
                stack.append(entry_path)
            else:
                files.append(entry_path)

    log.debug("walker_finished", root=str(root), file_count=len(files))
    return files
