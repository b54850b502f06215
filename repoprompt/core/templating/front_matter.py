# repoprompt/core/templating/front_matter.py
"""
Splits a template source into its YAML front matter and its body.

A template may start with a line of exactly '---', a YAML mapping, and a
closing '---' line. Missing or unterminated front matter is not an error:
the whole source becomes the body and the config falls back to defaults.
Front matter that is present but cannot be decoded raises
MalformedFrontMatter, since the author explicitly opened a config block.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple
import structlog
import yaml

from repoprompt.config.settings import DEFAULT_MAX_TURNS
from repoprompt.exceptions import MalformedFrontMatter

log = structlog.get_logger(__name__)

FRONT_MATTER_DELIMITER = "---"

# camelCase spellings accepted as aliases.
_KEY_ALIASES: Dict[str, str] = {
    "systemPrompt": "system_prompt",
    "usePreset": "use_preset",
    "maxTurns": "max_turns",
    "requiredVariables": "required",
    "required_variables": "required",
}

@dataclass
class TemplateConfig:
    system_prompt: str = ""
    use_preset: bool = True  # defer to the caller's default preset instead of system_prompt
    tools: List[str] = field(default_factory=list)  # empty means unrestricted
    max_turns: int = DEFAULT_MAX_TURNS
    required: List[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TemplateConfig":
        """Builds a config from decoded front matter, validating each field."""
        normalized: Dict[str, Any] = {}
        for key, value in data.items():
            key = _KEY_ALIASES.get(str(key), str(key))
            if key not in _FIELD_VALIDATORS:
                log.warning("unknown_front_matter_key_ignored", key=key)
                continue
            if value is None:
                continue  # "key:" with no value keeps the default
            normalized[key] = _FIELD_VALIDATORS[key](value)
        return cls(**normalized)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "system_prompt": self.system_prompt,
            "use_preset": self.use_preset,
            "tools": list(self.tools),
            "max_turns": self.max_turns,
            "required": list(self.required),
        }

def _validate_str(name: str):
    def check(value: Any) -> str:
        if not isinstance(value, str):
            raise MalformedFrontMatter(f"'{name}' must be a string, got {type(value).__name__}")
        return value
    return check

def _validate_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise MalformedFrontMatter(f"'use_preset' must be true or false, got {value!r}")
    return value

def _validate_str_list(name: str):
    def check(value: Any) -> List[str]:
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise MalformedFrontMatter(f"'{name}' must be a list of strings, got {value!r}")
        # ordered set: keep first occurrence.
        return list(dict.fromkeys(value))
    return check

def _validate_max_turns(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedFrontMatter(f"'max_turns' must be an integer, got {value!r}")
    if value < 1:
        raise MalformedFrontMatter(f"'max_turns' must be at least 1, got {value}")
    return value

_FIELD_VALIDATORS = {
    "system_prompt": _validate_str("system_prompt"),
    "use_preset": _validate_bool,
    "tools": _validate_str_list("tools"),
    "max_turns": _validate_max_turns,
    "required": _validate_str_list("required"),
}

@dataclass
class PromptTemplate:
    config: TemplateConfig
    body: str
    source: str = ""  # raw text, kept so registrations can be replayed

def _split_lines(source: str) -> List[str]:
    # like str.splitlines() but only breaks on '\n' / '\r\n'.
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]

def extract_front_matter(source: str) -> Tuple[TemplateConfig, str]:
    lines = _split_lines(source)

    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return TemplateConfig(), source

    end_idx: Optional[int] = None
    for idx in range(1, len(lines)):
        if lines[idx].strip() == FRONT_MATTER_DELIMITER:
            end_idx = idx
            break

    if end_idx is None:
        log.debug("front_matter_unterminated_using_defaults")
        return TemplateConfig(), source

    front_matter_text = "\n".join(lines[1:end_idx])
    try:
        decoded = yaml.safe_load(front_matter_text) if front_matter_text.strip() else None
    except yaml.YAMLError as e:
        raise MalformedFrontMatter(f"failed to parse front matter: {e}") from e

    if decoded is None:
        config = TemplateConfig()
    elif isinstance(decoded, dict):
        config = TemplateConfig.from_mapping(decoded)
    else:
        raise MalformedFrontMatter(f"front matter must be a mapping, got {type(decoded).__name__}")

    body = "\n".join(lines[end_idx + 1:])
    return config, body

def parse_template(source: str) -> PromptTemplate:
    # parses a template source into its config and body.
    config, body = extract_front_matter(source)
    return PromptTemplate(config=config, body=body, source=source)
