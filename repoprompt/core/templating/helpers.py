"""
Custom Handlebars helper functions for repoprompt templates.

pybars passes the current 'this' context as the first argument to every
helper; helpers here ignore it unless stated otherwise.
"""
from typing import Any

from repoprompt.util import get_language_hint

class MissingTemplateVariable(ValueError):
    # raised from inside a render; the engine wraps it in RenderFailure.
    pass

def lang_hint_helper(_this: Any, path_or_ext: Any = None) -> str:
    # fence language for a path ("src/app.py") or bare extension ("py").
    value = str(path_or_ext or "")
    ext = value.rsplit(".", 1)[-1] if "." in value else value
    return get_language_hint(ext)

def required_helper(_this: Any, value: Any = None, name: Any = None) -> Any:
    """
    Outputs `value`, failing the render when it is missing or empty.

    Usage: {{required feature_name "feature_name"}}
    """
    if value is None or value == "":
        raise MissingTemplateVariable(f"required template variable '{name or '?'}' is missing or empty")
    return value

def default_helper(_this: Any, value: Any = None, fallback: Any = "") -> Any:
    # {{default feature_description "no description"}}
    return fallback if value is None or value == "" else value

def upper_helper(_this: Any, value: Any = None) -> str:
    return str(value or "").upper()

def lower_helper(_this: Any, value: Any = None) -> str:
    return str(value or "").lower()

# Dictionary of helpers registered with every TemplateEngine
BUILTIN_HELPERS = {
    "lang_hint": lang_hint_helper,
    "required": required_helper,
    "default": default_helper,
    "upper": upper_helper,
    "lower": lower_helper,
}
