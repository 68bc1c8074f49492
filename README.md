# wfrunner

`wfrunner` is a library of the pieces used to run CI workflow jobs on your
own machine. It has no runtime dependencies.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `wfrunner.expression` works with `${{ ... }}` expressions in text.
  `has_expression` tells whether a string holds one. `rewrite_sub_expression`
  turns a string with several embedded expressions into one `format(...)`
  call, and raises `ExpressionSyntaxError` for an unclosed string or block.
  `interpolate` and `eval_bool` take an evaluator callable that you supply:
  `interpolate` logs evaluation errors and returns `""`, and raises
  `TypeError` when the result is not a string. `expand_node` returns a copy
  of a nested dict/list with its expressions evaluated, honouring the
  `${{ insert }}` key (merges a mapping into its parent) and splicing a
  scalar that evaluates to a list into the enclosing list.
- `wfrunner.config` has the `Config` dataclass with the settings for a run.
  `container_path` and `container_workdir` give a host path as seen inside a
  container, turning Windows drive paths into `/mnt/<drive>/...`.
  `read_event_json` returns the event file's text, or `{}` when no event
  path is set.
- `wfrunner.naming` builds container-safe names (`create_container_name`,
  `trim_to_len`) and has small mapping helpers: `merge_maps`,
  `nested_map_lookup` and `as_string`.
- `wfrunner.logger` has per-job logging: `job_logger` returns a logger writing
  to standard output with a colour per job, `step_logger` adds a step name,
  and `value_masker` replaces secret values with `***`. The formatters are
  `JobLogFormatter` (text, coloured on a terminal, honouring `CLICOLOR` and
  `CLICOLOR_FORCE`) and `JobLogJSONFormatter`.
- `wfrunner.run_context` builds the `GithubContext` from a `Config`
  (`GithubContext.from_config`), the container binds and mounts
  (`binds_and_mounts`) and the `GITHUB_*` environment (`with_github_env`,
  `image_os`). It also has `action_cache_dir`, `parse_hostname` for container
  options, `job_status` and `validate_credentials`.
- `wfrunner.job_executor` builds a job's pipeline with `new_job_executor`. It
  runs the container start and pre steps, then the main steps, then the post
  steps in reverse order. Step failures are recorded on the
  `JobErrorContainer` instead of being raised, and outputs are interpolated
  and the container closed whatever happens. `JobInfo` describes what a job
  must provide.
- `wfrunner.steps` has `StepStatus` and `StepResult`, environment merging
  (`merge_into_map`, `prepend_path`), script naming (`get_script_name`), the
  per-shell script wrappers (`shell_script`) and `split_command`.
- `wfrunner.actions` parses `{org}/{repo}[/path]@ref` references
  (`RemoteAction.parse`, `clone_url`, `is_checkout`), classifies steps
  (`classify_step`, `StepType`), detects checkouts of the local repository
  (`is_local_checkout`) and prepares docker steps (`docker_image`,
  `docker_command`, `step_container_env`, `action_cache_path`).
- `wfrunner.plan` has helpers for a whole plan: `handle_failure`,
  `job_display_name`, `max_parallel` and `padded_job_name`.

## Example

```python
from wfrunner.expression import rewrite_sub_expression
from wfrunner.actions import RemoteAction

rewrite_sub_expression("Hello ${{ 'World' }}", False)
# "format('Hello {0}', 'World')"

action = RemoteAction.parse("actions/checkout@v2")
action.clone_url()    # "https://github.com/actions/checkout"
action.is_checkout()  # True
```

## What it does not do

`wfrunner` is a set of building blocks, not a complete runner. It has no
expression evaluator of its own (`interpolate`, `eval_bool` and `expand_node`
call one you pass in), it does not parse workflow files, it does not talk to
a container engine or clone repositories, and it provides no command-line
program.