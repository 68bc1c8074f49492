import pytest

from wfrunner.plan import handle_failure, job_display_name, max_parallel, padded_job_name


def test_handle_failure_reports_failed_job():
    with pytest.raises(RuntimeError, match="Job 'wf/nopanic' failed"):
        handle_failure({"wf/ok": "success", "wf/nopanic": "failure"})


def test_handle_failure_first_failure_wins():
    with pytest.raises(RuntimeError, match="Job 'a' failed"):
        handle_failure([("a", "failure"), ("b", "failure")])


def test_handle_failure_all_success():
    assert handle_failure({"a": "success", "b": ""}) is None


def test_job_display_name_single():
    assert job_display_name("build", 0, 1) == "build"


def test_job_display_name_matrix():
    names = [job_display_name("build", i, 3) for i in range(3)]
    assert names[0] == "build-1"
    assert len(set(names)) == 3
    assert all(n.startswith("build-") for n in names)


def test_max_parallel_default():
    assert max_parallel(None, 10) == 4


def test_max_parallel_limited_by_matrix():
    assert max_parallel(None, 2) == 2
    assert max_parallel(8, 3) == 3


def test_max_parallel_strategy():
    assert max_parallel(2, 5) == 2


def test_padded_job_name():
    padded = padded_job_name("wf/job", 12)
    assert len(padded) == 12
    assert padded.rstrip() == "wf/job"


def test_padded_job_name_no_truncation():
    assert padded_job_name("a-long-name", 3) == "a-long-name"