"""Shared fixtures for jobcore tests."""

from __future__ import annotations

import io

import pytest

from jobcore.model import Job


@pytest.fixture
def make_job():
    """Build a Job with in-memory streams and a fixed owner label."""

    def _make(name: str = "echo", *args: str, handler=None, env=None, owner="eng") -> Job:
        return Job(
            name=name,
            args=list(args),
            env=env or [],
            stdin=io.BytesIO(),
            stdout=io.BytesIO(),
            stderr=io.BytesIO(),
            handler=handler,
            owner=owner,
        )

    return _make


@pytest.fixture
def handlers_file(tmp_path):
    path = tmp_path / "my_handlers.py"
    path.write_text(
        "def greet(job):\n"
        "    msg = '%s %s\\n' % (job.getenv('GREETING') or 'hello', ' '.join(job.args))\n"
        "    job.stdout.write(msg.encode('utf-8'))\n"
        "    return '0'\n"
        "\n"
        "def fail(job):\n"
        "    job.errorf('refusing to run')\n"
        "    return 'permission denied'\n"
        "\n"
        "def count(job):\n"
        "    job.setenv_int('count', job.getenv_int('count') + 1)\n"
        "    return '0'\n"
        "\n"
        "HANDLERS = {'greet': greet, 'fail': fail, 'count': count}\n",
        encoding="utf-8",
    )
    return path
