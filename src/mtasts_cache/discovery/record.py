"""Parser for the _mta-sts TXT policy marker (RFC 8461 section 3.1).

    v=STSv1; id=20160831085700Z;

The record must start with the version field, fields are separated by
";" with optional surrounding whitespace, and id is 1-32 alphanumerics.
Extension fields are allowed and ignored.
"""
from __future__ import annotations

import re

from mtasts_cache.domain.errors import PolicySyntaxError
from mtasts_cache.domain.types import PolicyId

_ID_RE = re.compile(r"[A-Za-z0-9]{1,32}")
_EXT_NAME_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]{0,31}")
_EXT_VALUE_RE = re.compile(r"[\x21-\x3a\x3c\x3e-\x7e]+")


def parse_dns_record(txt: str) -> PolicyId:
    """Extract the policy id from a marker record.

    Raises PolicySyntaxError if the record is not a valid STSv1 marker.
    """
    fields = [f.strip(" \t") for f in txt.split(";")]
    # A single trailing ";" is allowed.
    if len(fields) > 1 and fields[-1] == "":
        fields.pop()

    if not fields or fields[0] != "v=STSv1":
        raise PolicySyntaxError("marker does not start with v=STSv1")

    policy_id: PolicyId | None = None
    for field in fields[1:]:
        name, sep, value = field.partition("=")
        if not sep:
            raise PolicySyntaxError(f"malformed marker field: {field!r}")
        if name == "id":
            if policy_id is not None:
                raise PolicySyntaxError("duplicate id field")
            if not _ID_RE.fullmatch(value):
                raise PolicySyntaxError(f"invalid policy id: {value!r}")
            policy_id = value
        elif not _EXT_NAME_RE.fullmatch(name) or not _EXT_VALUE_RE.fullmatch(value):
            raise PolicySyntaxError(f"malformed extension field: {field!r}")

    if policy_id is None:
        raise PolicySyntaxError("marker has no id field")
    return policy_id
