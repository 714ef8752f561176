# errors.py
from __future__ import annotations

from dataclasses import dataclass


class JobError(Exception):
    """Base class for every error raised by jobcore."""


@dataclass
class DecodeError(JobError):
    """The source could not be decoded as a JSON object."""
    message: str
    key: str | None = None

    def __str__(self) -> str:
        if self.key:
            return f"decode error ({self.key}): {self.message}"
        return f"decode error: {self.message}"


@dataclass
class EncodeError(JobError):
    """Writing the encoded environment to its sink failed."""
    message: str

    def __str__(self) -> str:
        return f"encode error: {self.message}"


@dataclass
class EncodingError(JobError):
    """A value could not be serialized before being stored."""
    key: str | None
    message: str

    def __str__(self) -> str:
        if self.key:
            return f"cannot encode {self.key!r}: {self.message}"
        return f"cannot encode value: {self.message}"


@dataclass
class ExecutionFailure(JobError):
    """A job finished with a status other than "0"."""
    job: str
    status: str

    def __str__(self) -> str:
        return f"{self.job}: {self.status}"
