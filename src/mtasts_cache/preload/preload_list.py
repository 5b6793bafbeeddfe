"""STARTTLS Everywhere style preload list: parsing, lookup, policy synthesis.

A preload list seeds policies for domains before their own DNS/HTTPS
discovery has succeeded. Schema (consumed fields):

    {
      "timestamp": "2014-06-06T14:30:16.000000+00:00",   # or a Unix int
      "expires":   "2014-06-06T15:30:16.000000+00:00",   # or a Unix int
      "author": "...", "version": "0.1",
      "policy-aliases": {"gmail": {"mode": "testing", "mxs": [".mail.google.com"]}},
      "policies": {"gmail.com": {"policy-alias": "gmail"}, ...}
    }

Lists are immutable snapshots: a newer list replaces an older one
wholesale, it is never patched in place.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import IO, Any, Mapping

from mtasts_cache.domain.canonical import to_ascii
from mtasts_cache.domain.errors import PreloadFormatError
from mtasts_cache.domain.policy import Mode, Policy

LIST_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_list_time(value: Any) -> datetime:
    """Decode a timestamp field.

    The JSON type decides the format: strings use the fixed
    microsecond-precision ISO-8601 layout, integers are Unix seconds.
    """
    if isinstance(value, str):
        try:
            return datetime.strptime(value, LIST_TIME_FORMAT).astimezone(timezone.utc)
        except ValueError as err:
            raise PreloadFormatError(f"bad timestamp {value!r}: {err}") from err
    # bool is an int subclass, but true/false is not a timestamp.
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as err:
            raise PreloadFormatError(f"bad timestamp {value!r}: {err}") from err
    raise PreloadFormatError(f"timestamp must be a string or integer, got {value!r}")


def format_list_time(value: datetime) -> str:
    s = value.astimezone(timezone.utc).strftime(LIST_TIME_FORMAT)
    # strftime renders %z as +0000; the list format wants +00:00.
    return s[:-2] + ":" + s[-2:]


@dataclass(frozen=True, slots=True)
class PreloadEntry:
    """One policy entry, or an alias target.

    domain is only set on entries returned by PreloadList.lookup().
    """
    domain: str = ""
    policy_alias: str | None = None
    mode: Mode | None = None
    mxs: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, data: Any) -> PreloadEntry:
        if not isinstance(data, dict):
            raise PreloadFormatError(f"policy entry must be an object, got {data!r}")
        mode = data.get("mode")
        mxs = data.get("mxs") or []
        alias = data.get("policy-alias") or None
        if not isinstance(mxs, list) or not all(isinstance(m, str) for m in mxs):
            raise PreloadFormatError(f"mxs must be a list of strings, got {mxs!r}")
        if alias is not None and not isinstance(alias, str):
            raise PreloadFormatError(f"policy-alias must be a string, got {alias!r}")
        try:
            return cls(
                policy_alias=alias,
                mode=Mode(mode) if mode is not None else None,
                mxs=tuple(mxs),
            )
        except ValueError as err:
            raise PreloadFormatError(f"unknown mode {mode!r}") from err

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.policy_alias is not None:
            out["policy-alias"] = self.policy_alias
        if self.mode is not None:
            out["mode"] = self.mode.value
        if self.mxs:
            out["mxs"] = list(self.mxs)
        return out

    def sts(self, plist: PreloadList, now: datetime | None = None) -> Policy:
        """Convert the entry into the equivalent MTA-STS policy.

        max_age is the time left until the list expires, so the policy
        lapses together with the list. It is negative for an expired
        list; callers must reject non-positive values.

        MX entries written as ".example.net" become "*.example.net" and
        are converted to A-labels where possible. An MX that fails
        conversion is kept as written.
        """
        now = now or _utcnow()
        mx: list[str] = []
        for host in self.mxs:
            if host.startswith("."):
                host = "*" + host
            if host.startswith("*."):
                ace = to_ascii(host[2:])
                if ace is not None:
                    host = "*." + ace
            else:
                ace = to_ascii(host)
                if ace is not None:
                    host = ace
            mx.append(host)
        return Policy(
            mode=self.mode or Mode.NONE,
            max_age=int((plist.expires - now).total_seconds()),
            mx=tuple(mx),
        )


@dataclass(frozen=True, slots=True)
class PreloadList:
    """Immutable, time-bounded preload list snapshot."""
    timestamp: datetime
    expires: datetime
    author: str = ""
    version: str = ""
    aliases: Mapping[str, PreloadEntry] = field(default_factory=dict)
    entries: Mapping[str, PreloadEntry] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the mappings so a shared snapshot cannot be edited.
        object.__setattr__(self, "aliases", MappingProxyType(dict(self.aliases)))
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def expired(self, now: datetime | None = None) -> bool:
        return self.expires < (now or _utcnow())

    def lookup(self, domain: str) -> PreloadEntry | None:
        """Find the entry for domain, resolving one level of aliasing.

        The domain is converted to lowercase A-labels first; names that
        are not valid IDNA never match. An alias that is missing, or
        that itself points at another alias, is a miss: the format has
        exactly one level of indirection.
        """
        ace = to_ascii(domain)
        if ace is None:
            return None
        if ace.endswith("."):
            ace = ace[:-1]

        entry = self.entries.get(ace)
        if entry is None:
            return None
        if entry.policy_alias is not None:
            entry = self.aliases.get(entry.policy_alias)
            if entry is None or entry.policy_alias is not None:
                return None
        return replace(entry, domain=ace)

    def to_json(self) -> dict[str, Any]:
        return {
            "timestamp": format_list_time(self.timestamp),
            "author": self.author,
            "version": self.version,
            "expires": format_list_time(self.expires),
            "policy-aliases": {k: v.to_json() for k, v in self.aliases.items()},
            "policies": {k: v.to_json() for k, v in self.entries.items()},
        }


def load_list(data: str | bytes) -> PreloadList:
    """Parse a preload list document. Raises PreloadFormatError."""
    try:
        doc = json.loads(data)
    except ValueError as err:
        raise PreloadFormatError(f"preload list is not valid JSON: {err}") from err
    if not isinstance(doc, dict):
        raise PreloadFormatError("preload list must be a JSON object")

    for required in ("timestamp", "expires"):
        if required not in doc:
            raise PreloadFormatError(f"preload list has no {required} field")

    aliases = doc.get("policy-aliases") or {}
    policies = doc.get("policies") or {}
    if not isinstance(aliases, dict) or not isinstance(policies, dict):
        raise PreloadFormatError("policy-aliases and policies must be objects")

    return PreloadList(
        timestamp=parse_list_time(doc["timestamp"]),
        expires=parse_list_time(doc["expires"]),
        author=str(doc.get("author", "")),
        version=str(doc.get("version", "")),
        aliases={name: PreloadEntry.from_json(e) for name, e in aliases.items()},
        entries={name: PreloadEntry.from_json(e) for name, e in policies.items()},
    )


def read_list(fp: IO[str] | IO[bytes]) -> PreloadList:
    """load_list() for an open file."""
    return load_list(fp.read())
