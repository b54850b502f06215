# repoprompt/core/templating/__init__.py
"""
Templating module for repoprompt.

Provides the PromptRegistry for registering and rendering named prompt
templates, the front-matter parser for template configuration, and the
RenderContext passed to templates.
"""
from .context_builder import FileContext, RenderContext
from .front_matter import PromptTemplate, TemplateConfig, extract_front_matter, parse_template
from .registry import EntryKind, PromptRegistry, TemplateEntry, TemplateOrigin
from .renderer import TemplateEngine

__all__ = [
    "FileContext",
    "RenderContext",
    "PromptTemplate",
    "TemplateConfig",
    "extract_front_matter",
    "parse_template",
    "EntryKind",
    "PromptRegistry",
    "TemplateEntry",
    "TemplateOrigin",
    "TemplateEngine",
]
