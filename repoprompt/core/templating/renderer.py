# repoprompt/core/templating/renderer.py
"""
Contains the TemplateEngine class responsible for compiling and rendering
Handlebars templates by name.

Prompts are plain text, so `{{ value }}` substitutes verbatim just like
`{{{ value }}}`: no HTML escaping is applied to context values or helper
results.
"""
import functools
from typing import Any, Callable, Dict, Mapping
import pybars # type: ignore
import structlog

from repoprompt.exceptions import RenderFailure, TemplateNotFoundError, TemplateSyntaxError

# Import built-in helpers
from .helpers import BUILTIN_HELPERS

log = structlog.get_logger(__name__)

def _unescaped(value: Any) -> Any:
    # pybars emits strlist values as-is; plain str values get HTML-escaped.
    # empty strings stay str so {{#if}} still treats them as false.
    if isinstance(value, str):
        return pybars.strlist([value]) if value else value
    if isinstance(value, Mapping):
        return {key: _unescaped(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)) and not isinstance(value, pybars.strlist):
        return [_unescaped(item) for item in value]
    return value

def _unescaped_helper(helper: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(helper)
    def wrapper(this: Any, *args: Any, **kwargs: Any) -> Any:
        return _unescaped(helper(this, *args, **kwargs))
    return wrapper

class TemplateEngine:
    """Holds compiled Handlebars templates keyed by name and renders them."""
    def __init__(self):
        self.handlebars_compiler = pybars.Compiler()
        self.registered_helpers: Dict[str, Callable[..., Any]] = {
            name: _unescaped_helper(helper) for name, helper in BUILTIN_HELPERS.items()
        }
        self._compiled_templates: Dict[str, Callable[..., Any]] = {}

    def add_template(self, name: str, body: str) -> None:
        """Compiles `body` and stores it under `name`, replacing any previous one."""
        try:
            compiled = self.handlebars_compiler.compile(body)
        except Exception as e:
            log.error("template_compilation_failed", name=name, error=str(e))
            raise TemplateSyntaxError(f"Failed to compile template '{name}': {e}") from e
        # copy-on-write so concurrent renders keep a consistent view.
        updated = dict(self._compiled_templates)
        updated[name] = compiled
        self._compiled_templates = updated
        log.debug("template_compiled_successfully", name=name)

    def register_helper(self, name: str, helper: Callable[..., Any]) -> None:
        self.registered_helpers = {**self.registered_helpers, name: _unescaped_helper(helper)}

    def copy(self) -> "TemplateEngine":
        # compiled templates and helpers are shared, the maps are not.
        clone = TemplateEngine.__new__(TemplateEngine)
        clone.handlebars_compiler = self.handlebars_compiler
        clone.registered_helpers = dict(self.registered_helpers)
        clone._compiled_templates = dict(self._compiled_templates)
        return clone

    def remove(self, name: str) -> None:
        updated = dict(self._compiled_templates)
        updated.pop(name, None)
        self._compiled_templates = updated

    def render(self, name: str, template_context_data: Mapping[str, Any]) -> str:
        """Renders the named template with the given context data."""
        compiled_templates = self._compiled_templates
        template_fn = compiled_templates.get(name)
        if template_fn is None:
            raise TemplateNotFoundError(name)

        log.debug("rendering_template_with_context", name=name, context_keys=list(template_context_data.keys()))
        try:
            rendered = template_fn(
                _unescaped(template_context_data), helpers=self.registered_helpers, partials=compiled_templates
            )
        except Exception as e:
            log.error("template_rendering_error_occurred", name=name, error_message=str(e))
            raise RenderFailure(f"Template render failed for '{name}': {e}") from e
        return str(rendered)
