from __future__ import annotations

import io

import pytest

from jobcore import settings
from jobcore.env import Env
from jobcore.errors import ExecutionFailure
from jobcore.model import COMMAND_NOT_FOUND, Job


def _lines(stream: io.BytesIO) -> list[str]:
    return stream.getvalue().decode("utf-8").splitlines()


class TestRun:
    def test_no_handler_is_command_not_found(self, make_job):
        job = make_job("frobnicate")
        with pytest.raises(ExecutionFailure) as exc:
            job.run()
        assert job.status == COMMAND_NOT_FOUND
        assert "frobnicate" in str(exc.value)
        assert "command not found" in str(exc.value)
        assert exc.value.job == "frobnicate"
        assert exc.value.status == COMMAND_NOT_FOUND

    def test_zero_status_succeeds(self, make_job):
        job = make_job("echo", handler=lambda j: "0")
        job.run()
        assert job.status == "0"
        assert job.succeeded

    @pytest.mark.parametrize("status", ["1", "permission denied", "0 ", "00"])
    def test_other_status_fails(self, make_job, status):
        job = make_job("rm", "-rf", handler=lambda j: status)
        with pytest.raises(ExecutionFailure) as exc:
            job.run()
        assert str(exc.value) == f"rm: {status}"
        assert job.status == status
        assert not job.succeeded

    def test_status_is_empty_before_run(self, make_job):
        job = make_job("echo", handler=lambda j: "0")
        assert job.status == ""
        assert not job.executed

    def test_empty_status_fails(self, make_job):
        job = make_job("echo", handler=lambda j: "")
        with pytest.raises(ExecutionFailure) as exc:
            job.run()
        assert str(exc.value) == "echo: "
        assert job.executed
        assert str(job).endswith(" = ERR ()")

    def test_none_status_is_empty(self, make_job):
        job = make_job("echo", handler=lambda j: None)
        with pytest.raises(ExecutionFailure):
            job.run()
        assert job.status == ""

    def test_int_status_is_stringified(self, make_job):
        job = make_job("echo", handler=lambda j: 0)
        job.run()
        assert job.status == "0"

    def test_handler_sees_args_env_and_streams(self, make_job):
        def handler(job):
            data = job.stdin.read()
            job.stdout.write(data.upper())
            job.stderr.write(job.getenv("WHO").encode())
            return "0" if job.args == ["a", "b"] else "bad args"

        job = make_job("shout", "a", "b", handler=handler, env=["WHO=me"])
        job.stdin.write(b"hello")
        job.stdin.seek(0)
        job.run()
        assert b"HELLO" in job.stdout.getvalue()
        assert job.stderr.getvalue() == b"me"

    def test_handler_may_write_env(self, make_job):
        def handler(job):
            job.setenv_list("out", ["x", "y"])
            return "0"

        job = make_job("collect", handler=handler)
        job.run()
        assert job.getenv_list("out") == ["x", "y"]

    def test_markers_around_handler(self, make_job):
        def handler(job):
            job.logf("working on %s", job.args[0])
            return "0"

        job = make_job("echo", "hi", handler=handler)
        job.run()
        assert _lines(job.stdout) == [
            "[eng.echo(hi)] {",
            "[eng.echo(hi)] working on hi",
            "[eng.echo(hi) = OK (0)] }",
        ]

    def test_closing_marker_written_when_handler_raises(self, make_job):
        def handler(job):
            raise RuntimeError("boom")

        job = make_job("explode", handler=handler)
        with pytest.raises(RuntimeError, match="boom"):
            job.run()
        assert _lines(job.stdout) == ["[eng.explode()] {", "[eng.explode()] }"]
        assert job.status == ""
        assert not job.executed


class TestDisplay:
    def test_str_before_run(self, make_job):
        job = make_job("echo", "a", "b")
        assert str(job) == "eng.echo(a, b)"
        assert " = " not in str(job)

    def test_str_after_success(self, make_job):
        job = make_job("echo", handler=lambda j: "0")
        job.run()
        assert str(job) == "eng.echo() = OK (0)"

    def test_str_after_failure(self, make_job):
        job = make_job("echo", handler=lambda j: "bad")
        with pytest.raises(ExecutionFailure):
            job.run()
        assert " = ERR (bad)" in str(job)

    def test_owner_uses_str(self, make_job):
        class Engine:
            def __str__(self):
                return "docker"

        assert str(make_job("ps", owner=Engine())) == "docker.ps()"

    def test_default_owner_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "OWNER", "node1")
        assert str(Job(name="ps")) == "node1.ps()"

    def test_logf_single_trailing_newline(self, make_job):
        job = make_job("echo")
        n = job.logf("hello\n\n\n")
        assert job.stdout.getvalue() == b"[eng.echo()] hello\n"
        assert n == len(b"[eng.echo()] hello\n")

    def test_logf_formats_args(self, make_job):
        job = make_job("echo")
        job.logf("%s=%d\n", "count", 3)
        assert job.stdout.getvalue() == b"[eng.echo()] count=3\n"

    def test_logf_without_args_keeps_percent(self, make_job):
        job = make_job("echo")
        job.logf("100% done")
        job.logf("100%%")
        assert _lines(job.stdout) == ["[eng.echo()] 100% done", "[eng.echo()] 100%%"]

    def test_logf_with_args_unescapes_percent(self, make_job):
        job = make_job("echo")
        job.logf("%d%% done", 50)
        assert job.stdout.getvalue() == b"[eng.echo()] 50% done\n"

    def test_errorf_writes_to_stderr(self, make_job):
        job = make_job("echo")
        job.errorf("oops")
        assert job.stderr.getvalue() == b"[eng.echo()] oops\n"
        assert job.stdout.getvalue() == b""


class TestConstruction:
    def test_raw_entry_list_becomes_env(self):
        job = Job(name="x", env=["A=1", "A=2"])
        assert isinstance(job.env, Env)
        assert job.getenv("A") == "2"
        assert job.environ() == {"A": "2"}

    def test_args_are_strings(self):
        job = Job(name="x", args=[1, "b"])
        assert job.args == ["1", "b"]

    def test_default_streams_are_separate_buffers(self):
        a, b = Job(name="a"), Job(name="b")
        a.logf("hi")
        assert b.stdout.getvalue() == b""

    def test_env_delegates(self, make_job):
        job = make_job()
        job.setenv_bool("b", True)
        job.setenv_int("i", 5)
        job.setenv_json("j", {"k": [1]})
        assert job.getenv_bool("b")
        assert job.getenv_int("i") == 5
        assert job.getenv_json("j") == {"k": [1]}

        buf = io.BytesIO()
        job.encode_env(buf)
        other = make_job()
        other.decode_env(io.BytesIO(buf.getvalue()))
        assert other.export_env() == {"b": 1, "i": 5, "j": {"k": [1]}}

        other.import_env({"extra": "yes"})
        assert other.getenv_bool("extra")
