# tests/test_front_matter.py
"""Tests for splitting templates into YAML front matter and body."""

import pytest

from repoprompt.core.templating.front_matter import TemplateConfig, extract_front_matter, parse_template
from repoprompt.exceptions import MalformedFrontMatter


class TestExtractFrontMatter:

    def test_full_front_matter(self):
        source = (
            "---\n"
            "system_prompt: You are a planner.\n"
            "use_preset: false\n"
            "tools:\n"
            "  - Read\n"
            "  - Grep\n"
            "max_turns: 20\n"
            "---\n"
            "Plan {{feature_name}}.\n"
        )
        config, body = extract_front_matter(source)
        assert config.system_prompt == "You are a planner."
        assert config.use_preset is False
        assert config.tools == ["Read", "Grep"]
        assert config.max_turns == 20
        assert body == "Plan {{feature_name}}."

    def test_no_front_matter_returns_source_unchanged(self):
        source = "Hello, {{ main_branch }}!"
        config, body = extract_front_matter(source)
        assert config == TemplateConfig()
        assert body == source

    def test_defaults(self):
        config = TemplateConfig()
        assert config.system_prompt == ""
        assert config.use_preset is True
        assert config.tools == []
        assert config.max_turns == 100
        assert config.required == []

    def test_unterminated_front_matter_is_body(self):
        source = "---\nmax_turns: 5\nno closing delimiter\n"
        config, body = extract_front_matter(source)
        assert config == TemplateConfig()
        assert body == source

    def test_empty_front_matter_block_uses_defaults(self):
        config, body = extract_front_matter("---\n---\nbody text")
        assert config == TemplateConfig()
        assert body == "body text"

    def test_partial_front_matter_fills_defaults(self):
        config, _ = extract_front_matter("---\nmax_turns: 7\n---\nx")
        assert config.max_turns == 7
        assert config.use_preset is True
        assert config.tools == []

    def test_camel_case_keys_are_accepted(self):
        source = "---\nsystemPrompt: hi\nusePreset: false\nmaxTurns: 3\n---\nbody"
        config, body = extract_front_matter(source)
        assert config.system_prompt == "hi"
        assert config.use_preset is False
        assert config.max_turns == 3
        assert body == "body"

    def test_unknown_keys_are_ignored(self):
        config, _ = extract_front_matter("---\nauthor: someone\nmax_turns: 4\n---\nbody")
        assert config.max_turns == 4

    def test_crlf_line_endings(self):
        config, body = extract_front_matter("---\r\nmax_turns: 9\r\n---\r\nline one\r\nline two\r\n")
        assert config.max_turns == 9
        assert body == "line one\nline two"

    def test_delimiter_inside_body_is_kept(self):
        _, body = extract_front_matter("---\nmax_turns: 2\n---\nabove\n---\nbelow")
        assert body == "above\n---\nbelow"

    def test_duplicate_tools_keep_first_occurrence(self):
        config, _ = extract_front_matter("---\ntools: [Read, Bash, Read]\n---\nx")
        assert config.tools == ["Read", "Bash"]

    def test_required_variables(self):
        config, _ = extract_front_matter("---\nrequired:\n  - feature_name\n---\nx")
        assert config.required == ["feature_name"]


class TestMalformedFrontMatter:

    @pytest.mark.parametrize("front_matter", [
        "max_turns: [unclosed",   # invalid yaml
        "- just\n- a list",      # not a mapping
        "max_turns: lots",        # wrong type
        "max_turns: 0",           # below minimum
        "use_preset: maybe",      # not a boolean
        "tools: Read",            # not a list
        "system_prompt: [a, b]",  # not a string
    ])
    def test_raises(self, front_matter):
        with pytest.raises(MalformedFrontMatter):
            extract_front_matter(f"---\n{front_matter}\n---\nbody")


class TestParseTemplate:

    def test_keeps_source(self):
        source = "---\nmax_turns: 12\n---\nDo {{task_kind}}."
        template = parse_template(source)
        assert template.source == source
        assert template.body == "Do {{task_kind}}."
        assert template.config.max_turns == 12

    def test_config_to_dict(self):
        config = TemplateConfig(system_prompt="s", tools=["Read"], max_turns=5)
        assert config.to_dict() == {
            "system_prompt": "s",
            "use_preset": True,
            "tools": ["Read"],
            "max_turns": 5,
            "required": [],
        }
