# model.py
from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import IO, Any, Callable, Dict, List, Optional, Sequence

from . import settings
from .env import Env
from .errors import ExecutionFailure

COMMAND_NOT_FOUND = "command not found"

Handler = Callable[["Job"], Any]


def _normalize_status(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


@dataclass(eq=False, repr=False)
class Job:
    """
    A unit of work: name, arguments, environment, three byte streams and a
    string exit status.

    The status "0" means success. Any other string is an error and doubles
    as the human readable reason.

    `owner` is only used to label log lines; `handler` is resolved by the
    caller and receives the job as its sole argument.
    """
    name: str
    args: List[str] = field(default_factory=list)
    env: Env = field(default_factory=Env)
    stdin: IO[bytes] = field(default_factory=io.BytesIO)
    stdout: IO[bytes] = field(default_factory=io.BytesIO)
    stderr: IO[bytes] = field(default_factory=io.BytesIO)
    handler: Optional[Handler] = None
    owner: Any = field(default_factory=lambda: settings.OWNER)

    status: str = field(default="", init=False)
    _executed: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.args = [str(a) for a in self.args]
        if not isinstance(self.env, Env):
            self.env = Env(self.env)

    # ---- execution ----

    def run(self) -> None:
        """
        Execute the job and block until the handler returns.

        Raises ExecutionFailure when the final status is not "0".
        """
        self.logf("{")
        try:
            if self.handler is None:
                status = COMMAND_NOT_FOUND
            else:
                status = self.handler(self)
            self.status = _normalize_status(status)
            self._executed = True
        finally:
            self.logf("}")
        if self.status != "0":
            raise ExecutionFailure(job=self.name, status=self.status)

    @property
    def executed(self) -> bool:
        return self._executed

    @property
    def succeeded(self) -> bool:
        return self._executed and self.status == "0"

    # ---- display / logging ----

    def __str__(self) -> str:
        s = f"{self.owner}.{self.name}({', '.join(self.args)})"
        if self._executed:
            okerr = "OK" if self.status == "0" else "ERR"
            s = f"{s} = {okerr} ({self.status})"
        return s

    def __repr__(self) -> str:
        return f"<Job {self}>"

    def logf(self, fmt: str, *args: Any) -> int:
        """
        Write one prefixed line to stdout. Returns the number of bytes written.

        `fmt` is %-formatted only when `args` are given; without args it is
        written literally, so logf("100%%") logs "100%%".
        """
        return self._write_line(self.stdout, fmt, args)

    def errorf(self, fmt: str, *args: Any) -> int:
        """Like logf, but to stderr."""
        return self._write_line(self.stderr, fmt, args)

    def _write_line(self, stream: IO[bytes], fmt: str, args: Sequence[Any]) -> int:
        message = fmt.rstrip("\n")
        if args:
            message = message % tuple(args)
        data = f"[{self}] {message}\n".encode("utf-8")
        stream.write(data)
        return len(data)

    # ---- environment ----

    def setenv(self, key: str, value: str) -> None:
        self.env.setenv(key, value)

    def getenv(self, key: str) -> str:
        return self.env.getenv(key)

    def environ(self) -> Dict[str, str]:
        return self.env.environ()

    def getenv_bool(self, key: str) -> bool:
        return self.env.getenv_bool(key)

    def setenv_bool(self, key: str, value: bool) -> None:
        self.env.setenv_bool(key, value)

    def getenv_list(self, key: str) -> List[str]:
        return self.env.getenv_list(key)

    def setenv_list(self, key: str, values: Sequence[str]) -> None:
        self.env.setenv_list(key, values)

    def getenv_int(self, key: str, default: int = 0) -> int:
        return self.env.getenv_int(key, default)

    def setenv_int(self, key: str, value: int) -> None:
        self.env.setenv_int(key, value)

    def getenv_json(self, key: str) -> Any:
        return self.env.getenv_json(key)

    def setenv_json(self, key: str, value: Any) -> None:
        self.env.setenv_json(key, value)

    def decode_env(self, src: IO) -> None:
        self.env.decode_env(src)

    def encode_env(self, dst: IO) -> None:
        self.env.encode_env(dst)

    def export_env(self, target: Any = None) -> Any:
        return self.env.export_env(target)

    def import_env(self, src: Any) -> None:
        self.env.import_env(src)
