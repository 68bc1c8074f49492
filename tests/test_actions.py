import pytest

from wfrunner.actions import (
    RemoteAction,
    StepType,
    action_cache_path,
    classify_step,
    docker_command,
    docker_image,
    is_local_checkout,
    step_container_env,
)


@pytest.mark.parametrize(
    "uses, run, expected",
    [
        ("remote/action@v1", None, StepType.USES_ACTION_REMOTE),
        ("./action@v1", None, StepType.USES_ACTION_LOCAL),
        ("docker://image:tag", None, StepType.USES_DOCKER_URL),
        (None, "cmd", StepType.RUN),
    ],
)
def test_classify_step(uses, run, expected):
    assert classify_step(uses, run) is expected


def test_classify_step_both_is_invalid():
    with pytest.raises(ValueError, match="Invalid run/uses syntax"):
        classify_step("remote/action@v1", "cmd")


def test_classify_step_neither_is_invalid():
    with pytest.raises(ValueError):
        classify_step("", "")


def test_parse_remote_action():
    action = RemoteAction.parse("remote/action@v1")
    assert (action.org, action.repo, action.path, action.ref, action.url) == (
        "remote",
        "action",
        "",
        "v1",
        "github.com",
    )


def test_parse_remote_action_with_path():
    action = RemoteAction.parse("org/repo/sub/dir@main")
    assert action.path == "sub/dir"
    assert action.ref == "main"


@pytest.mark.parametrize("uses", ["", "actions/hello-world", "actions/hello@"])
def test_parse_remote_action_requires_ref(uses):
    with pytest.raises(ValueError, match=r"Expected format \{org\}/\{repo\}\[/path\]@ref"):
        RemoteAction.parse(uses)


def test_clone_url_uses_instance():
    action = RemoteAction.parse("remote/action@v1")
    assert action.clone_url() == "https://github.com/remote/action"
    action.url = "ghe.example.com"
    assert action.clone_url() == "https://ghe.example.com/remote/action"


def test_is_checkout():
    assert RemoteAction.parse("actions/checkout@v2").is_checkout() is True
    assert RemoteAction.parse("remote/action@v1").is_checkout() is False


def test_is_local_checkout_plain():
    assert is_local_checkout("actions/checkout@v2", {}, "o/r", "refs/heads/main") is True


def test_is_local_checkout_other_repository():
    assert is_local_checkout("actions/checkout@v2", {"repository": "x/y"}, "o/r", "main") is False


def test_is_local_checkout_other_ref():
    assert is_local_checkout("actions/checkout@v2", {"ref": "dev"}, "o/r", "main") is False


def test_is_local_checkout_matching_with():
    with_ = {"repository": "o/r", "ref": "main"}
    assert is_local_checkout("actions/checkout@v2", with_, "o/r", "main") is True


@pytest.mark.parametrize(
    "uses", ["remote/action@v1", "./checkout", "docker://actions/checkout", "actions/checkout"]
)
def test_is_local_checkout_other_steps(uses):
    assert is_local_checkout(uses, {}, "o/r", "main") is False


def test_docker_image():
    assert docker_image("docker://node:14") == "node:14"


def test_docker_command():
    assert docker_command("--foo 'a b'", "") == (["--foo", "a b"], [])
    assert docker_command("", "/entry.sh") == ([], ["/entry.sh"])


def test_docker_command_unbalanced_quotes():
    with pytest.raises(ValueError):
        docker_command("'open", None)


def test_step_container_env():
    entries = step_container_env({"A": "1"})
    assert entries == [
        "A=1",
        "RUNNER_TOOL_CACHE=/opt/hostedtoolcache",
        "RUNNER_OS=Linux",
        "RUNNER_TEMP=/tmp",
    ]


def test_action_cache_path():
    path = action_cache_path("/home/someone/.cache/act", "remote/action@v1")
    assert path.endswith("act/remote-action@v1")