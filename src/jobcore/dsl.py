# src/jobcore/dsl.py
from __future__ import annotations

from typing import IO, Any, Iterable, List, Mapping, Optional, Union

from .env import Env
from .model import Handler, Job

EnvSource = Union[Env, Mapping[str, Any], Iterable[str]]


def _fill_env(target: Env, env: Optional[EnvSource]) -> None:
    if env is None:
        return
    if isinstance(env, Mapping):
        for key, value in env.items():
            if isinstance(value, str):
                target.setenv(key, value)
            else:
                target.setenv_json(key, value)
        return
    target.extend(env)


# ---------------------------------------------------------------------
# Functional Job helper
# ---------------------------------------------------------------------

def job(
    name: str,
    *args: str,  # allow: job("echo", "hello", "world")
    handler: Optional[Handler] = None,
    env: Optional[EnvSource] = None,
    owner: Any = None,
    stdin: Optional[IO[bytes]] = None,
    stdout: Optional[IO[bytes]] = None,
    stderr: Optional[IO[bytes]] = None,
) -> Job:
    """
    Create a Job.

    `env` may be a mapping (strings stored as-is, anything else as JSON) or
    an iterable of raw "key=value" entries.
    """
    j = Job(name=name, args=list(args), handler=handler)
    _fill_env(j.env, env)

    if owner is not None:
        j.owner = owner
    if stdin is not None:
        j.stdin = stdin
    if stdout is not None:
        j.stdout = stdout
    if stderr is not None:
        j.stderr = stderr
    return j


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class JobBuilder:
    def __init__(self, name: str):
        self.name = name
        self._args: list[str] = []
        self._env = Env()
        self._handler: Optional[Handler] = None
        self._owner: Any = None
        self._streams: dict[str, IO[bytes]] = {}

    def with_args(self, *args: str):
        self._args.extend(str(a) for a in args)
        return self

    def with_env(self, **env):
        # force values to str, like a process environment
        for k, v in env.items():
            self._env.setenv(k, str(v))
        return self

    def with_env_bool(self, key: str, value: bool):
        self._env.setenv_bool(key, value)
        return self

    def with_env_list(self, key: str, values: List[str]):
        self._env.setenv_list(key, values)
        return self

    def with_env_json(self, key: str, value: Any):
        self._env.setenv_json(key, value)
        return self

    def import_env(self, src: Any):
        self._env.import_env(src)
        return self

    def handled_by(self, handler: Handler):
        self._handler = handler
        return self

    def owned_by(self, owner: Any):
        self._owner = owner
        return self

    def with_streams(
        self,
        *,
        stdin: Optional[IO[bytes]] = None,
        stdout: Optional[IO[bytes]] = None,
        stderr: Optional[IO[bytes]] = None,
    ):
        for key, stream in (("stdin", stdin), ("stdout", stdout), ("stderr", stderr)):
            if stream is not None:
                self._streams[key] = stream
        return self

    def build(self) -> Job:
        return job(
            self.name,
            *self._args,
            handler=self._handler,
            env=self._env,
            owner=self._owner,
            **self._streams,
        )


def build(name: str) -> JobBuilder:
    """Convenience: build('echo').with_args('hi').handled_by(fn).build()"""
    return JobBuilder(name)
