"""
Contains the sources of the built-in templates bundled with repoprompt.

Each source carries YAML front matter followed by a Handlebars body. Use
{{{...}}} for file content and other free text so it is not HTML-escaped.
"""

_REPOSITORY_FILES_BLOCK = r"""{{#if files}}
## Repository files
{{#each files}}
### {{{this.path}}}
```{{this.language}}
{{{this.content}}}
```
{{/each}}
{{/if}}"""

INIT_TEMPLATE = r"""---
system_prompt: ""
use_preset: true
tools:
  - Read
  - Glob
  - Grep
  - Write
max_turns: 30
---
You are setting up a repository for agent-driven development.

Repository: {{{repo_path}}}
Main branch: {{main_branch}}
{{#if user_message}}

Request: {{{user_message}}}
{{/if}}

Survey the repository layout, build and test commands, and coding
conventions. Summarize them so later planning and implementation tasks can
rely on them.

""" + _REPOSITORY_FILES_BLOCK

PLAN_TEMPLATE = r"""---
system_prompt: ""
use_preset: true
tools:
  - Read
  - Glob
  - Grep
max_turns: 50
required:
  - feature_name
---
Create an implementation plan for feature "{{{feature_name}}}" (id {{feature_id}}).

Repository: {{{repo_path}}}
Base branch: {{main_branch}}
{{#if feature_description}}

Feature description:
{{{feature_description}}}
{{/if}}

Request: {{{user_message}}}

Break the work into ordered, independently verifiable steps. For each step
name the files to change and the tests that prove it works. Do not modify
any files while planning.

""" + _REPOSITORY_FILES_BLOCK

IMPLEMENT_TEMPLATE = r"""---
system_prompt: ""
use_preset: true
tools:
  - Read
  - Write
  - Edit
  - Glob
  - Grep
  - Bash
max_turns: 100
required:
  - feature_name
---
Implement feature "{{{feature_name}}}" (id {{feature_id}}).

Repository: {{{repo_path}}}
Base branch: {{main_branch}}
{{#if worktree_path}}
Work in: {{{worktree_path}}}{{#if worktree_branch}} (branch {{{worktree_branch}}}){{/if}}
{{/if}}
{{#if feature_description}}

Feature description:
{{{feature_description}}}
{{/if}}
{{#if implementation_plan}}

Follow this plan:
{{{implementation_plan}}}
{{/if}}

Request: {{{user_message}}}

Keep changes focused on the feature, add tests alongside the code, and run
the test suite before finishing.

""" + _REPOSITORY_FILES_BLOCK

VERIFY_TEMPLATE = r"""---
system_prompt: ""
use_preset: true
tools:
  - Read
  - Glob
  - Grep
  - Bash
max_turns: 50
required:
  - feature_name
---
Verify the implementation of feature "{{{feature_name}}}" (id {{feature_id}}).

Repository: {{{repo_path}}}
Base branch: {{main_branch}}
{{#if worktree_branch}}
Feature branch: {{{worktree_branch}}}
{{/if}}
{{#if implementation_summary}}

Implementation summary:
{{{implementation_summary}}}
{{/if}}
{{#if diff_content}}

Changes:
```diff
{{{diff_content}}}
```
{{/if}}

Run the build and the tests, check that every planned step is done, and
report each problem with the file and line it concerns.

""" + _REPOSITORY_FILES_BLOCK

REVIEW_TEMPLATE = r"""---
system_prompt: ""
use_preset: true
tools:
  - Read
  - Glob
  - Grep
max_turns: 30
required:
  - feature_name
---
Review the changes for feature "{{{feature_name}}}" (id {{feature_id}}) against {{main_branch}}.
{{#if implementation_summary}}

Author's summary:
{{{implementation_summary}}}
{{/if}}
{{#if diff_content}}

```diff
{{{diff_content}}}
```
{{else}}

No diff was supplied; inspect the repository files directly.
{{/if}}

Report correctness issues first, then maintainability concerns. Quote the
lines you refer to.

""" + _REPOSITORY_FILES_BLOCK

RESUME_TEMPLATE = r"""---
system_prompt: ""
use_preset: true
tools:
  - Read
  - Write
  - Edit
  - Glob
  - Grep
  - Bash
max_turns: 100
required:
  - feature_name
  - current_phase
---
Resume work on feature "{{{feature_name}}}" (id {{feature_id}}).

Repository: {{{repo_path}}}
Base branch: {{main_branch}}
{{#if worktree_path}}
Work in: {{{worktree_path}}}{{#if worktree_branch}} (branch {{{worktree_branch}}}){{/if}}
{{/if}}

The previous session stopped during phase "{{{current_phase}}}"{{#if current_step}} at step "{{{current_step}}}"{{/if}}.
It used {{default turns_so_far "0"}} turns and ${{default cost_so_far "0"}} so far.
{{#if implementation_plan}}

Plan being followed:
{{{implementation_plan}}}
{{/if}}

Check the current state of the work before continuing; do not redo steps
that are already complete.

""" + _REPOSITORY_FILES_BLOCK

# name -> source, in the order they are registered.
BUILTIN_TEMPLATES = {
    "init": INIT_TEMPLATE,
    "plan": PLAN_TEMPLATE,
    "implement": IMPLEMENT_TEMPLATE,
    "verify": VERIFY_TEMPLATE,
    "review": REVIEW_TEMPLATE,
    "resume": RESUME_TEMPLATE,
}
