class RepoPromptError(Exception):
    # base exception for all application-specific errors.
    pass

class ConfigError(RepoPromptError):
    # errors related to configuration.
    pass

class DiscoveryError(RepoPromptError):
    # errors during repository scanning. these abort the scan.
    pass

class InvalidRootError(DiscoveryError):
    # the scan root does not exist or is not a directory.
    pass

class WalkError(DiscoveryError):
    # a directory could not be listed during the walk.
    pass

class FileSkipError(RepoPromptError):
    # a single file could not be read; callers skip it and keep scanning.
    pass

class ExceedsSizeLimit(FileSkipError):
    def __init__(self, path, size: int, max_size: int):
        self.path = path
        self.size = size
        self.max_size = max_size
        super().__init__(f"file '{path}' is {size} bytes, exceeds limit of {max_size} bytes")

class FileDecodeError(FileSkipError):
    # file content is not valid utf-8 text.
    pass

class TemplateError(RepoPromptError):
    # errors related to template parsing, lookup and rendering.
    pass

class MalformedFrontMatter(TemplateError):
    # front matter block is present but cannot be decoded.
    pass

class TemplateSyntaxError(TemplateError):
    # template body failed to compile.
    pass

class TemplateNotFoundError(TemplateError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"template '{name}' not found")

class RenderFailure(TemplateError):
    # the template evaluator failed while rendering.
    pass

class ContextValidationError(RepoPromptError):
    # render context is missing values a template requires.
    pass

class OutputError(RepoPromptError):
    # errors during output operations.
    pass

class GitError(RepoPromptError):
    # errors from git commands.
    pass
