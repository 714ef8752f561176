# env.py
"""
Ordered, string-only environment store for jobs.

The store is a list of raw ``key=value`` entries. Nothing is ever removed:
``setenv`` appends and every read replays the list so the last entry for a
key wins. Structured values (lists, numbers, nested objects) travel as JSON
text inside the raw value.

Entries written from structured data (``decode_env``, ``setenv_json``) also
remember the value they came from, so ``encode_env`` can give back exactly
what went in. Untagged entries are re-parsed as JSON on encode, falling back
to the raw string.
"""
from __future__ import annotations

import copy
import dataclasses
import io
import json
import math
from dataclasses import dataclass
from typing import IO, Any, Dict, Iterable, Iterator, List, Optional, Sequence

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import DecodeError, EncodeError, EncodingError

FALSE_VALUES = frozenset({"", "0", "no", "false", "none"})

_UNTAGGED = object()


def parse_bool(raw: str) -> bool:
    """False for "", "0", "no", "false", "none" (trimmed, any case); true otherwise."""
    return raw.strip(" \t").lower() not in FALSE_VALUES


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if math.isinf(value):
        raise ValueError(f"number out of range: {text}")
    return value


def _loads(text: str | bytes) -> Any:
    """json.loads restricted to standard JSON (no NaN/Infinity, finite floats)."""
    return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)


@dataclass(frozen=True)
class _Entry:
    raw: str
    tag: Any = _UNTAGGED

    def split(self) -> Optional[tuple[str, str]]:
        key, sep, value = self.raw.partition("=")
        if not sep:
            return None  # malformed, no separator
        return key, value

    @property
    def tagged(self) -> bool:
        return self.tag is not _UNTAGGED


class Env:
    """A job environment: ordered raw entries, last write wins on read."""

    def __init__(self, entries: Optional[Iterable[str]] = None):
        self._entries: List[_Entry] = [_Entry(str(e)) for e in (entries or [])]

    # ------------------------------------------------------------------
    # Raw store
    # ------------------------------------------------------------------

    def setenv(self, key: str, value: str) -> None:
        self._entries.append(_Entry(f"{key}={value}"))

    def getenv(self, key: str) -> str:
        value = ""
        for entry in self._entries:
            parts = entry.split()
            if parts is None or parts[0] != key:
                continue
            value = parts[1]
        return value

    def environ(self) -> Dict[str, str]:
        """Project the entries onto a dict, replaying them in order."""
        out: Dict[str, str] = {}
        for entry in self._entries:
            parts = entry.split()
            if parts is None:
                continue
            out[parts[0]] = parts[1]
        return out

    @property
    def entries(self) -> List[str]:
        return [e.raw for e in self._entries]

    def keys(self) -> List[str]:
        return list(self.environ())

    def copy(self) -> Env:
        other = Env()
        other._entries = list(self._entries)
        return other

    def extend(self, entries: Iterable[str] | Env) -> None:
        """Append raw entries, or every entry (tags included) of another Env."""
        if isinstance(entries, Env):
            self._entries.extend(entries._entries)
        else:
            self._entries.extend(_Entry(str(e)) for e in entries)

    def __contains__(self, key: object) -> bool:
        return self._last(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __repr__(self) -> str:
        return f"Env({self.entries!r})"

    def _setenv_tagged(self, key: str, raw: str, value: Any) -> None:
        if "=" in key:
            # the entry would split at the key's own "=", so the tag could not match it
            self.setenv(key, raw)
            return
        self._entries.append(_Entry(f"{key}={raw}", value))

    def _last(self, key: object) -> Optional[_Entry]:
        found = None
        for entry in self._entries:
            parts = entry.split()
            if parts is not None and parts[0] == key:
                found = entry
        return found

    def _structured(self) -> Dict[str, Any]:
        """Key -> structured value, using tags where present."""
        last: Dict[str, _Entry] = {}
        for entry in self._entries:
            parts = entry.split()
            if parts is not None:
                last[parts[0]] = entry

        out: Dict[str, Any] = {}
        for key, entry in last.items():
            if entry.tagged:
                out[key] = entry.tag
                continue
            raw = entry.split()[1]
            try:
                out[key] = _loads(raw)
            except ValueError:
                out[key] = raw
        return out

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    def getenv_bool(self, key: str) -> bool:
        return parse_bool(self.getenv(key))

    def setenv_bool(self, key: str, value: bool) -> None:
        self.setenv(key, "1" if value else "0")

    def getenv_list(self, key: str) -> List[str]:
        """
        Read a JSON array of strings.

        Anything that is not one (including plain scalars) comes back as a
        single-element list holding the raw value. JSON ``null`` is an empty
        list.
        """
        raw = self.getenv(key)
        try:
            value = json.loads(raw)
        except ValueError:
            return [raw]
        if value is None:
            return []
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            return [raw]
        return value

    def setenv_list(self, key: str, values: Sequence[str]) -> None:
        values = list(values)
        bad = [v for v in values if not isinstance(v, str)]
        if bad:
            raise EncodingError(key, f"list values must be strings, got {type(bad[0]).__name__}")
        try:
            sval = json.dumps(values)
        except (TypeError, ValueError) as exc:
            raise EncodingError(key, str(exc)) from exc
        self.setenv(key, sval)

    def getenv_int(self, key: str, default: int = 0) -> int:
        raw = self.getenv(key).strip(" \t")
        try:
            return int(raw)
        except ValueError:
            return default

    def setenv_int(self, key: str, value: int) -> None:
        self.setenv(key, str(int(value)))

    def getenv_json(self, key: str) -> Any:
        """Structured value for `key`; None when unset."""
        entry = self._last(key)
        if entry is None:
            return None
        if entry.tagged:
            return copy.deepcopy(entry.tag)
        raw = entry.split()[1]
        try:
            return _loads(raw)
        except ValueError as exc:
            raise DecodeError(str(exc), key=key) from exc

    def setenv_json(self, key: str, value: Any) -> None:
        try:
            sval = json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise EncodingError(key, str(exc)) from exc
        # keep a JSON-shaped copy (tuples become lists, no aliasing)
        self._setenv_tagged(key, sval, json.loads(sval))

    # ------------------------------------------------------------------
    # Structured encode/decode
    # ------------------------------------------------------------------

    def decode_env(self, src: IO) -> None:
        """
        Decode `src` as a JSON object and add each pair to the environment.

        Strings are stored verbatim, everything else as its JSON text.
        Raises DecodeError if `src` does not hold a JSON object.
        """
        try:
            data = json.load(src, parse_constant=_reject_constant, parse_float=_finite_float)
        except (ValueError, UnicodeDecodeError) as exc:
            raise DecodeError(str(exc)) from exc
        if not isinstance(data, dict):
            raise DecodeError(f"expected a JSON object, got {type(data).__name__}")

        for key, value in data.items():
            if isinstance(value, str):
                self._setenv_tagged(key, value, value)
                continue
            try:
                sval = json.dumps(value, allow_nan=False)
            except (TypeError, ValueError):
                self.setenv(key, str(value))
            else:
                self._setenv_tagged(key, sval, value)

    def encode_env(self, dst: IO) -> None:
        """Write the environment to `dst` as one JSON object and a newline."""
        text = json.dumps(self._structured(), allow_nan=False) + "\n"
        try:
            if isinstance(dst, io.TextIOBase):
                dst.write(text)
            else:
                dst.write(text.encode("utf-8"))
        except (OSError, ValueError, TypeError) as exc:
            raise EncodeError(str(exc)) from exc

    def export_env(self, target: Any = None) -> Any:
        """
        Encode the environment and decode it into `target`.

        target:
          - None: returns a plain dict
          - dict: updated in place and returned
          - a pydantic model class: returns a validated instance
          - a dataclass type: returns an instance built from the fields
        """
        buf = io.BytesIO()
        self.encode_env(buf)
        payload = buf.getvalue()

        if isinstance(target, type) and issubclass(target, BaseModel):
            try:
                return target.model_validate_json(payload)
            except ValidationError as exc:
                raise DecodeError(str(exc)) from exc

        data = json.loads(payload)
        if target is None:
            return data
        if isinstance(target, dict):
            target.update(data)
            return target
        if isinstance(target, type) and dataclasses.is_dataclass(target):
            try:
                return target(**data)
            except TypeError as exc:
                raise DecodeError(str(exc)) from exc
        raise TypeError(f"cannot export environment into {type(target).__name__}")

    def import_env(self, src: Any) -> None:
        """Serialize `src` to JSON and decode the result into the environment."""
        try:
            if isinstance(src, BaseModel):
                text = src.model_dump_json()
            else:
                if dataclasses.is_dataclass(src) and not isinstance(src, type):
                    src = dataclasses.asdict(src)
                text = json.dumps(src, allow_nan=False)
        except (TypeError, ValueError, PydanticSerializationError) as exc:
            raise EncodingError(None, str(exc)) from exc
        self.decode_env(io.BytesIO(text.encode("utf-8")))
