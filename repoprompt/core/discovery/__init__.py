# repoprompt/core/discovery/__init__.py
"""
Path discovery and filtering for repository scans.

Walks a directory tree with an explicit stack and decides which paths are
excluded by substring patterns or an extension allow-list.
"""
from .walker import walk_directory
from .pattern_matching import should_exclude, has_included_extension

__all__ = ["walk_directory", "should_exclude", "has_included_extension"]
