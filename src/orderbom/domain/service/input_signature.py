"""Canonical JSON and input signatures for pricing snapshots.

A snapshot's input signature is the SHA-256 of the canonical form of
``{treeVersionId, explicitSelections, env}``.  Canonical form sorts object
keys at every depth and renders numbers exactly like ``JSON.stringify`` so
that signatures written by the Node.js pricing service verify here too.
"""

from __future__ import annotations

import hashlib
import json
import math
import re
from typing import Any

from orderbom.domain.exceptions import SignatureInputError

MAX_DEPTH = 100

_SIGNATURE_RE = re.compile(r"^[0-9a-f]{64}$")

_MAX_SAFE_INTEGER = 2**53 - 1

# Env keys derived from line item fields; excluded so staleness tracks the
# current width/height/quantity instead of the values frozen in the snapshot.
COMPUTED_ENV_KEYS = frozenset(
    {"widthIn", "heightIn", "qty", "quantity", "sqft", "perimeterIn"}
)


def _format_number(value: int | float) -> str:
    if isinstance(value, int):
        if abs(value) <= _MAX_SAFE_INTEGER:
            return str(value)
        # Node holds every number as a double; render what it would have parsed.
        try:
            value = float(value)
        except OverflowError:
            raise SignatureInputError(
                "PBV2 signature input contains non-finite number"
            ) from None
    if not math.isfinite(value):
        raise SignatureInputError("PBV2 signature input contains non-finite number")
    if value == 0:
        return "0"

    # repr() gives the shortest round-trip digits, same as ECMAScript.
    sign = "-" if value < 0 else ""
    mantissa, _, exp = repr(abs(value)).partition("e")
    int_part, _, frac_part = mantissa.partition(".")
    digits = (int_part + frac_part).lstrip("0")
    point = len(int_part) + (int(exp) if exp else 0)
    if int_part == "0":
        stripped = frac_part.lstrip("0")
        point -= 1 + len(frac_part) - len(stripped)
        digits = stripped
    digits = digits.rstrip("0") or "0"
    k = len(digits)

    if k <= point <= 21:
        return sign + digits + "0" * (point - k)
    if 0 < point <= 21:
        return sign + digits[:point] + "." + digits[point:]
    if -6 < point <= 0:
        return sign + "0." + "0" * (-point) + digits
    e = point - 1
    exponent = ("+" if e > 0 else "-") + str(abs(e))
    if k == 1:
        return f"{sign}{digits}e{exponent}"
    return f"{sign}{digits[0]}.{digits[1:]}e{exponent}"


def _walk(value: Any, depth: int) -> str:
    if depth > MAX_DEPTH:
        raise SignatureInputError("PBV2 signature input too deep")
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, (int, float)):
        return _format_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_walk(v, depth + 1) for v in value) + "]"
    if isinstance(value, dict):
        parts = []
        for key in sorted(value):
            if not isinstance(key, str):
                raise SignatureInputError(
                    f"PBV2 signature input has non-string key {key!r}"
                )
            parts.append(json.dumps(key, ensure_ascii=False) + ":" + _walk(value[key], depth + 1))
        return "{" + ",".join(parts) + "}"
    raise SignatureInputError(
        f"PBV2 signature input contains non-JSON value of type {type(value).__name__}"
    )


def canonicalize(value: Any) -> str:
    """Serialize a JSON-like value with object keys sorted at every depth."""
    return _walk(value, 0)


def compute_input_signature(
    tree_version_id: str | None,
    explicit_selections: Any,
    env: Any,
) -> str:
    """Return the 64-char hex SHA-256 over the canonical signature payload."""
    payload = {
        "treeVersionId": str(tree_version_id or ""),
        "explicitSelections": explicit_selections,
        "env": env,
    }
    canonical = canonicalize(payload)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def is_signature_format(value: object) -> bool:
    return isinstance(value, str) and bool(_SIGNATURE_RE.match(value))


def pick_env_extras(env: dict | None) -> dict:
    """Keep the non-computed, JSON-safe entries of a snapshot env."""
    if not isinstance(env, dict):
        return {}
    extras = {}
    for key, value in env.items():
        if key in COMPUTED_ENV_KEYS:
            continue
        if value is None or isinstance(value, (bool, str, list, dict)):
            extras[key] = value
        elif isinstance(value, (int, float)) and math.isfinite(value):
            extras[key] = value
    return extras
