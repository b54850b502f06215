from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import structlog

log = structlog.get_logger(__name__)

class TaskKind(Enum):
    # the kind of agent task a prompt is rendered for.
    INIT = "init"
    PLANNING = "planning"
    IMPLEMENTATION = "implementation"
    VERIFICATION = "verification"
    REVIEW = "review"
    RESUME = "resume"

    @property
    def template_name(self) -> str:
        return _TASK_TEMPLATE_NAMES[self]

    @classmethod
    def from_string(cls, s: Optional[str]) -> Optional["TaskKind"]:
        if not s:
            return None
        value = s.strip().lower()
        for kind in cls:
            if value in (kind.value, kind.template_name):
                return kind
        log.warning("invalid_task_kind_string", input_string=s)
        return None

_TASK_TEMPLATE_NAMES = {
    TaskKind.INIT: "init",
    TaskKind.PLANNING: "plan",
    TaskKind.IMPLEMENTATION: "implement",
    TaskKind.VERIFICATION: "verify",
    TaskKind.REVIEW: "review",
    TaskKind.RESUME: "resume",
}

DEFAULT_EXCLUDE_PATTERNS = ["target/", ".git/", "node_modules/", ".trees/", ".claude/"]
DEFAULT_MAX_FILE_SIZE = 1_048_576  # 1 MiB
DEFAULT_MAX_FILES = 100
DEFAULT_MAX_TURNS = 100
DEFAULT_MAX_COST_USD = 10.0
DEFAULT_MAIN_BRANCH = "main"
DEFAULT_TEMPLATES_DIR = ".repoprompt/templates"
DEFAULT_LOG_LEVEL = "warning"

@dataclass
class ProjectMetadata:
    name: str = ""
    repository_url: str = ""
    main_branch: str = DEFAULT_MAIN_BRANCH

@dataclass
class PromptsSettings:
    # where user templates live and whether bundled templates fill the gaps.
    directory: str = DEFAULT_TEMPLATES_DIR
    use_bundled: bool = True

@dataclass
class RepositorySettings:
    # repository scanning settings handed to the context builder.
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_files: int = DEFAULT_MAX_FILES
    include_extensions: List[str] = field(default_factory=list)
    follow_symlinks: bool = False

@dataclass
class LimitsSettings:
    # agent budget caps applied on top of each template's own max_turns.
    max_turns: int = DEFAULT_MAX_TURNS
    max_cost_usd: float = DEFAULT_MAX_COST_USD

@dataclass
class LoggingSettings:
    level: str = DEFAULT_LOG_LEVEL

@dataclass
class ProjectSettings:
    # holds all configuration for one project, loaded from toml files.
    version: str = "1.0"
    project: ProjectMetadata = field(default_factory=ProjectMetadata)
    prompts: PromptsSettings = field(default_factory=PromptsSettings)
    repository: RepositorySettings = field(default_factory=RepositorySettings)
    limits: LimitsSettings = field(default_factory=LimitsSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
