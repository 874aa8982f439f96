"""Path resolution and mapping projection over decrypted sops documents.

A decrypted document is a JSON tree: dicts, lists and scalars.  A path is a
list of dict keys; resolution walks dicts only and yields ``None`` as soon
as the walk leaves them, so heterogeneous documents are looked up
tolerantly.  The resolved node is then encoded as a string.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from sopsprovider.shared.constants import ENCODING_JSON, ENCODING_STRING
from sopsprovider.shared.errors import ConfigurationError, InvalidEncoding

VALID_ENCODINGS = frozenset({ENCODING_STRING, ENCODING_JSON})


@dataclass(frozen=True)
class MappingEntry:
    """Where to find one output value and how to encode it."""

    path: list[str]
    encoding: str = ENCODING_STRING

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("path must not be empty")
        if not all(isinstance(segment, str) for segment in self.path):
            raise ValueError("path segments must be strings")
        if not isinstance(self.encoding, str) or self.encoding not in VALID_ENCODINGS:
            raise InvalidEncoding(self.encoding)


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _number_to_string(value: float) -> str:
    """Format a number the way ECMAScript's ``Number::toString`` does.

    Plain notation for 1e-7 <= |value| < 1e21, otherwise ``1.5e+21`` style,
    always with the shortest round-tripping digits.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    parts = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in parts.digits)
    k = len(digits)
    n = parts.exponent + k

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * -n + digits
    exponent = n - 1
    mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
    return f"{sign}{mantissa}e{'+' if exponent >= 0 else '-'}{abs(exponent)}"


def _scalar_to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _number_to_string(value)
    if isinstance(value, int) and abs(value) >= 10**21:
        return _number_to_string(float(value))
    return str(value)


def encode_value(value: Any, encoding: str) -> str | None:
    """Encode a resolved node.

    ``string`` refuses composites and null (returns ``None``); ``json``
    serialises anything.
    """
    if encoding == ENCODING_STRING:
        if value is None or isinstance(value, (dict, list)):
            return None
        return _scalar_to_string(value)
    if encoding == ENCODING_JSON:
        return _to_json(value)
    raise InvalidEncoding(encoding)


def resolve_mapping_path(data: Any, path: list[str], encoding: str) -> str | None:
    """Resolve ``path`` inside ``data`` and encode the result.

    Returns ``None`` when any node along the path is not a dict or the
    final key is missing.

    Raises:
        ValueError: If ``path`` is empty.
        InvalidEncoding: If ``encoding`` is neither ``string`` nor ``json``.
    """
    if not path:
        raise ValueError("path must not be empty")
    if not isinstance(encoding, str) or encoding not in VALID_ENCODINGS:
        raise InvalidEncoding(encoding)

    if not isinstance(data, dict):
        return None

    head, rest = path[0], path[1:]
    if rest:
        return resolve_mapping_path(data.get(head), rest, encoding)

    if head not in data:
        return None
    return encode_value(data[head], encoding)


def resolve_mappings(data: Any, mappings: Mapping[str, MappingEntry]) -> dict[str, str]:
    """Project every mapping over ``data``; unresolved names are left out."""
    mapped: dict[str, str] = {}
    for name, entry in mappings.items():
        value = resolve_mapping_path(data, entry.path, entry.encoding)
        if value is not None:
            mapped[name] = value
    return mapped


def parse_mappings(raw: str | Mapping[str, Any] | None) -> dict[str, MappingEntry]:
    """Build mapping entries from the ``Mappings`` resource property.

    The property arrives JSON encoded, e.g.
    ``{"dbPassword": {"path": ["db", "password"], "encoding": "string"}}``.
    Raises InvalidEncoding for an encoding other than ``string`` or ``json``
    so a bad mapping fails before anything is fetched.
    """
    if raw is None or raw == "":
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigurationError("Mappings is not valid JSON") from exc
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Mappings must be a JSON object")

    entries: dict[str, MappingEntry] = {}
    for name, item in raw.items():
        if not isinstance(item, Mapping):
            raise ConfigurationError(f"Mapping {name!r} must be an object")
        encoding = item.get("encoding")
        if encoding is None or encoding == "":
            encoding = ENCODING_STRING
        path = item.get("path")
        if not isinstance(path, list):
            raise ConfigurationError(f"Mapping {name!r} must have a list path")
        try:
            entries[name] = MappingEntry(
                path=list(path),
                encoding=encoding,
            )
        except ValueError as exc:
            raise ConfigurationError(f"Mapping {name!r}: {exc}") from exc
    return entries
