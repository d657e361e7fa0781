"""Filters as passed in the ``filters`` query parameter of list requests."""

import json
from dataclasses import dataclass
from typing import Dict, List, Protocol


class Matcher(Protocol):
    """An object that can be tested against a filter condition."""

    def match(self, typ: str, key: str, value: str) -> bool:
        """Return whether the object has the property ``typ`` ``key=value``."""


@dataclass(frozen=True)
class _Condition:
    key: str
    value: str
    expected: bool


class Filter:
    """A parsed filter that can be applied to matchers.

    Both the ``{"label": {"k=v": true}}`` format and the older
    ``{"label": ["k=v"]}`` format are accepted. Raises ValueError if the
    specification cannot be parsed.
    """

    def __init__(self, spec: str = "") -> None:
        self._filters: Dict[str, List[_Condition]] = {}
        request = _parse(spec) if spec else {}
        for typ, conditions in request.items():
            bucket = self._filters.setdefault(typ, [])
            for expr, expected in conditions.items():
                parts = expr.split("=")
                value = parts[1] if len(parts) == 2 else ""
                bucket.append(_Condition(parts[0], value, expected))

    def match(self, matcher: Matcher) -> bool:
        """Return True if the matcher satisfies every condition."""
        return all(
            matcher.match(typ, cond.key, cond.value) == cond.expected
            for typ, conditions in self._filters.items()
            for cond in conditions
        )


def _parse(spec: str) -> Dict[str, Dict[str, bool]]:
    try:
        data = json.loads(spec)
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid filter: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("invalid filter: expected a json object")
    try:
        return _as_current(data)
    except ValueError:
        return _as_legacy(data)


def _as_current(data: dict) -> Dict[str, Dict[str, bool]]:
    result = {}
    for typ, conditions in data.items():
        if conditions is None:
            result[typ] = {}
            continue
        if not isinstance(conditions, dict):
            raise ValueError(f"invalid filter conditions for {typ}")
        entry = {}
        for expr, expected in conditions.items():
            if expected is not None and not isinstance(expected, bool):
                raise ValueError(f"invalid filter value for {expr}")
            entry[expr] = bool(expected)
        result[typ] = entry
    return result


def _as_legacy(data: dict) -> Dict[str, Dict[str, bool]]:
    result = {}
    for typ, conditions in data.items():
        if conditions is None:
            result[typ] = {}
            continue
        if not isinstance(conditions, list):
            raise ValueError(f"invalid filter conditions for {typ}")
        entry = {}
        for expr in conditions:
            if expr is not None and not isinstance(expr, str):
                raise ValueError(f"invalid filter expression for {typ}")
            entry[expr or ""] = True
        result[typ] = entry
    return result