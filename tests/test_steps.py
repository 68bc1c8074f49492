import pytest

from wfrunner.steps import (
    DEFAULT_PATH,
    StepResult,
    StepStatus,
    get_script_name,
    merge_into_map,
    prepend_path,
    shell_script,
    split_command,
)


@pytest.mark.parametrize(
    "target, maps, expected",
    [
        ({}, [], {}),
        (
            {},
            [{"key1": "value1", "key2": "value2"}, {"key2": "overridden", "key3": "value3"}],
            {"key1": "value1", "key2": "overridden", "key3": "value3"},
        ),
        (
            {"key1": "value1", "key2": "value2"},
            [{"key1": "overridden"}],
            {"key1": "overridden", "key2": "value2"},
        ),
    ],
)
def test_merge_into_map(target, maps, expected):
    merge_into_map(target, *maps)
    assert target == expected


def test_merge_into_map_ignores_none():
    target = {"a": "1"}
    merge_into_map(target, None, {"b": "2"})
    assert target == {"a": "1", "b": "2"}


def test_prepend_path_with_extra_path_and_empty_path():
    env = prepend_path({"PATH": ""}, ["/path/to/extra/file"])
    assert env["PATH"] == (
        "/path/to/extra/file:/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"
    )


def test_prepend_path_default_without_extra():
    assert prepend_path({}, None) == {"PATH": DEFAULT_PATH}


def test_prepend_path_keeps_existing_path_and_input():
    source = {"PATH": "/bin", "X": "y"}
    env = prepend_path(source, ["/a", "/b"])
    assert env == {"PATH": "/a:/b:/bin", "X": "y"}
    assert source == {"PATH": "/bin", "X": "y"}


def test_get_script_name_top_level():
    assert get_script_name("1") == "workflow/1"


def test_get_script_name_nested_composites():
    assert get_script_name("2", ["inner", "outer"]) == "workflow/outer-composite-inner-composite-2"


def test_shell_script_bash():
    assert shell_script("bash", "workflow/1", "cmd") == ("workflow/1.sh", "\ncmd\n")


def test_shell_script_pwsh():
    name, script = shell_script("pwsh", "workflow/x", "Write-Host hi")
    assert name == "workflow/x.ps1"
    assert script == (
        "$ErrorActionPreference = 'stop'\nWrite-Host hi\n"
        "if ((Test-Path -LiteralPath variable:/LASTEXITCODE)) { exit $LASTEXITCODE }"
    )


@pytest.mark.parametrize(
    "shell, expected_name, expected_script",
    [
        ("cmd", "workflow/s.cmd", "@echo off\necho\n"),
        ("python", "workflow/s.py", "\necho\n"),
        ("sh", "workflow/s.sh", "\necho\n"),
        ("custom {0}", "workflow/s", "\necho\n"),
    ],
)
def test_shell_script_other_shells(shell, expected_name, expected_script):
    assert shell_script(shell, "workflow/s", "echo") == (expected_name, expected_script)


def test_split_command_bash():
    cmd = split_command(
        "bash --noprofile --norc -e -o pipefail {0}", "/var/run/act/workflow/1.sh"
    )
    assert cmd == [
        "bash", "--noprofile", "--norc", "-e", "-o", "pipefail", "/var/run/act/workflow/1.sh",
    ]


def test_split_command_replaces_only_first_placeholder():
    assert split_command("run {0} '{0}'", "/s") == ["run", "/s", "{0}"]


def test_split_command_unbalanced_quotes():
    with pytest.raises(ValueError):
        split_command("bash 'unterminated {0}", "/s")


def test_step_result_defaults():
    result = StepResult()
    assert result.conclusion == "success"
    assert result.outcome is StepStatus.SUCCESS
    assert result.outputs == {}


def test_step_result_with_failure_status():
    result = StepResult(conclusion=StepStatus("failure"), outcome=StepStatus("skipped"))
    assert result.conclusion is StepStatus.FAILURE
    assert str(result.conclusion) == "failure"
    assert str(result.outcome) == "skipped"
    assert result.outputs == {}