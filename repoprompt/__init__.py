# repoprompt/__init__.py
"""Build agent task prompts from a repository snapshot and Handlebars templates."""

__version__ = "0.1.0"
