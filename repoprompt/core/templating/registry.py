# repoprompt/core/templating/registry.py
"""
Named prompt templates: registration, lookup and rendering.

Every template lives in one map from name to TemplateEntry. An entry is
either REGISTERED (parsed from a source with front matter, so it has a
TemplateConfig) or ENGINE_ONLY (a bare body handed straight to the engine).
`has`, `get_config` and `render` all consult that map, and every REGISTERED
entry keeps its source so `reload()` can replay it.

The entry map and the engine that compiled it are published together as one
RegistryState; a writer builds the next state and swaps it in with a single
assignment.
"""
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union
import structlog

from repoprompt.config.settings import PromptsSettings
from repoprompt.exceptions import TemplateError, TemplateNotFoundError
from .context_builder import RenderContext
from .default_templates import BUILTIN_TEMPLATES
from .front_matter import PromptTemplate, TemplateConfig, parse_template
from .renderer import TemplateEngine

log = structlog.get_logger(__name__)

TEMPLATE_FILE_SUFFIX = ".hbs"

class EntryKind(Enum):
    REGISTERED = "registered"
    ENGINE_ONLY = "engine_only"

class TemplateOrigin(Enum):
    MEMORY = "memory"
    DIRECTORY = "directory"
    BUILTIN = "builtin"

@dataclass(frozen=True)
class TemplateEntry:
    name: str
    kind: EntryKind
    origin: TemplateOrigin
    body: str
    config: Optional[TemplateConfig] = None
    source: Optional[str] = None

@dataclass(frozen=True)
class RegistryState:
    entries: Dict[str, TemplateEntry]
    engine: TemplateEngine

class PromptRegistry:
    """
    Owns named templates and the engine that renders them.

    Construct one per command and pass it where it is needed. Mutations are
    serialized by a lock; renders read one published RegistryState.
    """
    def __init__(self, templates_dir: Optional[Union[str, Path]] = None, use_bundled: bool = True):
        self.templates_dir: Optional[Path] = Path(templates_dir) if templates_dir else None
        self.use_bundled = use_bundled
        self._state = RegistryState(entries={}, engine=TemplateEngine())
        # every directory handed to load_from_directory, in load order.
        self._loaded_directories: List[Path] = []
        self._write_lock = threading.RLock()

    @classmethod
    def from_settings(cls, project_root: Union[str, Path], prompts: PromptsSettings) -> "PromptRegistry":
        # user templates from the project directory, bundled ones as fallback.
        templates_dir = Path(prompts.directory)
        if not templates_dir.is_absolute():
            templates_dir = Path(project_root) / templates_dir
        registry = cls(templates_dir=templates_dir, use_bundled=prompts.use_bundled)
        registry.load_from_directory(templates_dir)
        if prompts.use_bundled:
            registry.load_builtin_set()
        return registry

    # --- registration ---

    def _publish(self, name: str, body: str, entry: Optional[TemplateEntry]) -> None:
        # caller holds the write lock. entry=None removes `name`.
        state = self._state
        engine = state.engine.copy()
        entries = {k: v for k, v in state.entries.items() if k != name}
        if entry is None:
            engine.remove(name)
        else:
            engine.add_template(name, body)
            entries[name] = entry
        self._state = RegistryState(entries=entries, engine=engine)

    def register(self, name: str, raw_source: str, origin: TemplateOrigin = TemplateOrigin.MEMORY) -> PromptTemplate:
        """
        Parses `raw_source` and registers it under `name`, replacing any
        existing template. Raises MalformedFrontMatter or TemplateSyntaxError;
        on error the registry is left unchanged.
        """
        template = parse_template(raw_source)
        entry = TemplateEntry(
            name=name, kind=EntryKind.REGISTERED, origin=origin,
            body=template.body, config=template.config, source=raw_source,
        )
        with self._write_lock:
            self._publish(name, template.body, entry)
        log.debug("registered_prompt_template", name=name, origin=origin.value)
        return template

    def register_body(self, name: str, body: str) -> None:
        # engine-only: the body is used verbatim, no front matter, no config.
        entry = TemplateEntry(name=name, kind=EntryKind.ENGINE_ONLY, origin=TemplateOrigin.MEMORY, body=body)
        with self._write_lock:
            self._publish(name, body, entry)
        log.debug("registered_engine_only_template", name=name)

    def remove(self, name: str) -> None:
        with self._write_lock:
            if name not in self._state.entries:
                raise TemplateNotFoundError(name)
            self._publish(name, "", None)

    # --- lookup ---

    def has(self, name: str) -> bool:
        return name in self._state.entries

    def get_entry(self, name: str) -> TemplateEntry:
        entry = self._state.entries.get(name)
        if entry is None:
            raise TemplateNotFoundError(name)
        return entry

    def get_config(self, name: str) -> TemplateConfig:
        entry = self.get_entry(name)
        if entry.config is None:
            # engine-only templates carry no configuration.
            raise TemplateNotFoundError(name)
        return entry.config

    def list(self) -> List[str]:
        return sorted(self._state.entries)

    def __len__(self) -> int:
        return len(self._state.entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    # --- bulk loading ---

    def load_from_directory(self, directory: Union[str, Path]) -> List[str]:
        """
        Registers every `*.hbs` file directly inside `directory` by file stem.
        A missing directory loads nothing. Returns the names loaded.

        The directory is remembered and read again by `reload()`. A file that
        cannot be read or is not UTF-8 raises TemplateError.
        """
        directory = Path(directory)
        with self._write_lock:
            if directory not in self._loaded_directories:
                self._loaded_directories.append(directory)
            if not directory.is_dir():
                log.debug("templates_directory_not_found", path=str(directory))
                return []

            loaded: List[str] = []
            for template_file in sorted(directory.iterdir()):
                if not template_file.is_file() or not template_file.name.endswith(TEMPLATE_FILE_SUFFIX):
                    continue
                name = template_file.name[: -len(TEMPLATE_FILE_SUFFIX)]
                try:
                    raw_source = template_file.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    log.error("template_file_unreadable", path=str(template_file), error=str(e))
                    raise TemplateError(f"Cannot read template file '{template_file}': {e}") from e
                self.register(name, raw_source, origin=TemplateOrigin.DIRECTORY)
                loaded.append(name)

        log.info("loaded_templates_from_directory", path=str(directory), count=len(loaded))
        return loaded

    def load_builtin_set(self, override: bool = False) -> List[str]:
        """
        Registers the bundled templates. Without `override`, a template of the
        same name that is already registered (e.g. from the project's
        templates directory) is kept.
        """
        loaded: List[str] = []
        with self._write_lock:
            for name, source in BUILTIN_TEMPLATES.items():
                if not override and self.has(name):
                    log.debug("builtin_template_shadowed", name=name)
                    continue
                self.register(name, source, origin=TemplateOrigin.BUILTIN)
                loaded.append(name)
        log.debug("loaded_builtin_templates", names=loaded)
        return loaded

    def reload(self) -> None:
        """
        Rebuilds every template from scratch: the templates directory and any
        other directory loaded so far, then the bundled set, then every
        template registered from memory, replayed from its retained source.

        The rebuilt state replaces the current one in a single step, so a
        concurrent render sees either the old templates or the new ones. If
        any step fails the registry is left unchanged and the error is raised.
        """
        with self._write_lock:
            directories: List[Path] = [self.templates_dir] if self.templates_dir is not None else []
            directories += [d for d in self._loaded_directories if d not in directories]
            in_memory = [entry for entry in self._state.entries.values() if entry.origin == TemplateOrigin.MEMORY]

            staging = PromptRegistry(templates_dir=self.templates_dir, use_bundled=self.use_bundled)
            for directory in directories:
                staging.load_from_directory(directory)
            if self.use_bundled:
                staging.load_builtin_set()
            for entry in in_memory:
                if entry.kind == EntryKind.REGISTERED and entry.source is not None:
                    staging.register(entry.name, entry.source, origin=TemplateOrigin.MEMORY)
                else:
                    staging.register_body(entry.name, entry.body)

            self._state = staging._state
            self._loaded_directories = directories
        log.info("templates_reloaded", count=len(self._state.entries))

    # --- rendering ---

    def render(self, name: str, context: Union[RenderContext, Mapping[str, Any]]) -> str:
        """
        Renders template `name` against `context`. Raises
        TemplateNotFoundError for unknown names and RenderFailure when the
        evaluator fails.
        """
        state = self._state
        if name not in state.entries:
            raise TemplateNotFoundError(name)
        data = context.to_template_dict() if isinstance(context, RenderContext) else dict(context)
        return state.engine.render(name, data)
