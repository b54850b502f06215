# repoprompt/config/loader.py
"""
Handles loading, merging, and saving of project settings from/to TOML files.
"""
import toml
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union
from dataclasses import asdict
import structlog

from repoprompt.exceptions import ConfigError

from .settings import (
    LimitsSettings, LoggingSettings, ProjectMetadata, ProjectSettings,
    PromptsSettings, RepositorySettings,
)

log = structlog.get_logger(__name__)

PROJECT_CONFIG_DIR = ".repoprompt"
PROJECT_CONFIG_FILENAMES = [f"{PROJECT_CONFIG_DIR}/config.toml", "repoprompt.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "repoprompt"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

VALID_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")

def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file(): return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigError(f"could not read config file '{file_path}': {e}") from e
    return data.get("tool", {}).get("repoprompt", {}) if file_path.name == "pyproject.toml" else data

def _merge_tables(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    # one level deep: project tables replace user keys within each section.
    merged = {k: dict(v) if isinstance(v, dict) else v for k, v in base.items()}
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged

def find_project_config_file(project_root: Path) -> Optional[Path]:
    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = project_root / filename
        if not candidate.is_file():
            continue
        if candidate.name == "pyproject.toml" and not _load_toml_file_data(candidate):
            continue
        return candidate
    return None

def load_and_merge_configs(project_root: Union[str, Path] = ".", user_config_file: Optional[Path] = None) -> Dict[str, Any]:
    merged_toml_data: Dict[str, Any] = {}
    user_config_file = USER_CONFIG_FILE if user_config_file is None else user_config_file
    if user_config_file.is_file():
        log.info("loading_user_global_config", path=str(user_config_file))
        merged_toml_data = _merge_tables(merged_toml_data, _load_toml_file_data(user_config_file))

    project_config_source_file = find_project_config_file(Path(project_root))
    if project_config_source_file is not None:
        log.info("loading_project_local_config", path=str(project_config_source_file))
        merged_toml_data = _merge_tables(merged_toml_data, _load_toml_file_data(project_config_source_file))

    if not merged_toml_data: log.debug("no_configuration_files_loaded")
    return merged_toml_data

# --- value checks ---

def _expect(section: str, key: str, value: Any, kind: type, kind_name: str) -> Any:
    if kind is int and isinstance(value, bool):
        raise ConfigError(f"[{section}] {key} must be {kind_name}, got {value!r}")
    if kind is float and isinstance(value, int) and not isinstance(value, bool):
        value = float(value)
    if not isinstance(value, kind):
        raise ConfigError(f"[{section}] {key} must be {kind_name}, got {value!r}")
    return value

def _str(section: str, key: str, value: Any) -> str:
    return _expect(section, key, value, str, "a string")

def _bool(section: str, key: str, value: Any) -> bool:
    return _expect(section, key, value, bool, "a boolean")

def _non_negative_int(section: str, key: str, value: Any) -> int:
    value = _expect(section, key, value, int, "an integer")
    if value < 0:
        raise ConfigError(f"[{section}] {key} must not be negative, got {value}")
    return value

def _positive_int(section: str, key: str, value: Any) -> int:
    value = _non_negative_int(section, key, value)
    if value == 0:
        raise ConfigError(f"[{section}] {key} must be positive")
    return value

def _non_negative_float(section: str, key: str, value: Any) -> float:
    value = _expect(section, key, value, float, "a number")
    if value < 0:
        raise ConfigError(f"[{section}] {key} must not be negative, got {value}")
    return value

def _str_list(section: str, key: str, value: Any) -> list:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"[{section}] {key} must be a list of strings, got {value!r}")
    return list(value)

def _log_level(section: str, key: str, value: Any) -> str:
    value = _str(section, key, value).lower()
    if value not in VALID_LOG_LEVELS:
        raise ConfigError(f"[{section}] {key} must be one of {', '.join(VALID_LOG_LEVELS)}, got {value!r}")
    return value

SECTION_SCHEMAS: Dict[str, Dict[str, Callable[[str, str, Any], Any]]] = {
    "project": {"name": _str, "repository_url": _str, "main_branch": _str},
    "prompts": {"directory": _str, "use_bundled": _bool},
    "repository": {
        "exclude_patterns": _str_list,
        "max_file_size": _non_negative_int,
        "max_files": _non_negative_int,
        "include_extensions": _str_list,
        "follow_symlinks": _bool,
    },
    "limits": {"max_turns": _positive_int, "max_cost_usd": _non_negative_float},
    "logging": {"level": _log_level},
}

SECTION_TYPES = {
    "project": ProjectMetadata,
    "prompts": PromptsSettings,
    "repository": RepositorySettings,
    "limits": LimitsSettings,
    "logging": LoggingSettings,
}

def settings_from_dict(data: Dict[str, Any]) -> ProjectSettings:
    """
    Builds ProjectSettings from merged TOML data. Unknown sections and keys
    are logged and ignored; values of the wrong type raise ConfigError.
    """
    sections: Dict[str, Any] = {}
    for section_name, section_data in data.items():
        if section_name == "version":
            continue
        schema = SECTION_SCHEMAS.get(section_name)
        if schema is None:
            log.warning("unknown_config_section_ignored", section=section_name)
            continue
        if not isinstance(section_data, dict):
            raise ConfigError(f"[{section_name}] must be a table")

        values: Dict[str, Any] = {}
        for key, value in section_data.items():
            check = schema.get(key)
            if check is None:
                log.warning("unknown_config_key_ignored", section=section_name, key=key)
                continue
            values[key] = check(section_name, key, value)
        sections[section_name] = SECTION_TYPES[section_name](**values)

    version = data.get("version", ProjectSettings().version)
    if not isinstance(version, str):
        version = str(version)
    settings = ProjectSettings(version=version, **sections)
    if not settings.project.main_branch:
        raise ConfigError("[project] main_branch must not be empty")
    return settings

def load_project_settings(project_root: Union[str, Path] = ".", user_config_file: Optional[Path] = None) -> ProjectSettings:
    settings = settings_from_dict(load_and_merge_configs(project_root, user_config_file))
    log.debug("project_settings_loaded", project_root=str(project_root), main_branch=settings.project.main_branch)
    return settings

def save_project_settings(settings: ProjectSettings, project_root: Union[str, Path] = ".") -> Path:
    """Writes `settings` to `.repoprompt/config.toml` under `project_root`."""
    target_toml_path = Path(project_root) / PROJECT_CONFIG_DIR / "config.toml"
    log.info("attempting_to_save_project_settings", path=str(target_toml_path))
    try:
        target_toml_path.parent.mkdir(parents=True, exist_ok=True)
        with target_toml_path.open("w", encoding="utf-8") as f: toml.dump(asdict(settings), f)
    except OSError as e:
        raise ConfigError(f"Error writing settings to {target_toml_path}: {e}") from e
    log.info("project_settings_saved_successfully", path=str(target_toml_path))
    return target_toml_path
