# repoprompt/core/git_utils.py
import subprocess
from pathlib import Path
from typing import List, Optional
import structlog

from repoprompt.exceptions import GitError

log = structlog.get_logger(__name__)


def _run_git(args: List[str], base_dir: Path) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=base_dir,
            capture_output=True,
            text=True,
            check=False
        )
    except OSError as e:
        raise GitError(f"could not run git: {e}") from e


def is_git_repository(base_dir: Path) -> bool:
    """
    Check if the given directory is within a git repository.

    Args:
        base_dir: The directory to check

    Returns:
        True if in a git repository, False otherwise (including when git is
        not installed)
    """
    try:
        result = _run_git(["rev-parse", "--git-dir"], base_dir)
    except GitError:
        return False
    return result.returncode == 0


def detect_repo_url(base_dir: Path, remote: str = "origin") -> Optional[str]:
    """
    Get the URL of a git remote.

    Args:
        base_dir: The directory to run git from
        remote: Name of the remote to query

    Returns:
        The remote URL, or None if base_dir is not a git repository, git is
        missing, or the remote is not configured
    """
    if not is_git_repository(base_dir):
        log.debug("not_a_git_repository", base_dir=str(base_dir))
        return None

    result = _run_git(["remote", "get-url", remote], base_dir)
    if result.returncode != 0:
        log.debug("git_remote_not_found", remote=remote, error=result.stderr.strip())
        return None

    url = result.stdout.strip()
    log.info("git_remote_url_detected", remote=remote, url=url)
    return url or None


def current_branch(base_dir: Path) -> Optional[str]:
    """
    Get the name of the checked-out branch.

    Returns:
        The branch name, or None outside a repository or on a detached HEAD
    """
    if not is_git_repository(base_dir):
        return None
    result = _run_git(["rev-parse", "--abbrev-ref", "HEAD"], base_dir)
    branch = result.stdout.strip() if result.returncode == 0 else ""
    if not branch or branch == "HEAD":
        return None
    return branch
