"""
Input Sanitization

Raw parameters arrive as loosely typed mappings. Before schema validation
they are:
1. Scanned for script-like content (a security rejection, never repaired)
2. Stripped of markup characters and dangerous protocols
3. Checked for non-finite numbers

Sanitization never raises. It returns the cleaned data plus the issues it
found, so the validator can report them with everything else.
"""

import math
import re
from collections.abc import Mapping
from numbers import Real
from typing import Any

from pydantic.alias_generators import to_snake

from fincalc.models.validation import ValidationIssue


DANGEROUS_PATTERNS: dict[str, re.Pattern] = {
    "javascript:": re.compile(r"javascript:", re.IGNORECASE),
    "<script": re.compile(r"<script", re.IGNORECASE),
    "eval(": re.compile(r"eval\(", re.IGNORECASE),
    "function(": re.compile(r"function\s*\(", re.IGNORECASE),
    "setTimeout": re.compile(r"setTimeout", re.IGNORECASE),
    "setInterval": re.compile(r"setInterval", re.IGNORECASE),
    "document.": re.compile(r"document\.", re.IGNORECASE),
    "window.": re.compile(r"window\.", re.IGNORECASE),
}

_STRIP_CHARS = re.compile(r"[<>'\"]")
_STRIP_PROTOCOLS = re.compile(r"javascript:|data:", re.IGNORECASE)


def _join(path: str, key: Any) -> str:
    return f"{path}.{key}" if path else str(key)


def normalize_keys(data: Any) -> Any:
    """Rewrite camelCase mapping keys to snake_case, recursively."""
    if isinstance(data, Mapping):
        return {
            (to_snake(key) if isinstance(key, str) else key): normalize_keys(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [normalize_keys(item) for item in data]
    return data


def find_dangerous_patterns(value: str) -> list[str]:
    """Names of every dangerous pattern present in the string."""
    return [name for name, pattern in DANGEROUS_PATTERNS.items() if pattern.search(value)]


def scan_dangerous(data: Any, path: str = "") -> dict[str, list[str]]:
    """
    Find script-like content anywhere in the data.

    Returns:
        {field_path: [pattern names]} for every offending string.
    """
    hits: dict[str, list[str]] = {}

    if isinstance(data, str):
        found = find_dangerous_patterns(data)
        if found:
            hits[path or "value"] = found
    elif isinstance(data, Mapping):
        for key, value in data.items():
            hits.update(scan_dangerous(value, _join(path, key)))
    elif isinstance(data, (list, tuple)):
        for index, item in enumerate(data):
            hits.update(scan_dangerous(item, _join(path, index)))

    return hits


def sanitize_string(value: str, max_length: int = 1000) -> str:
    cleaned = _STRIP_CHARS.sub("", value)
    cleaned = _STRIP_PROTOCOLS.sub("", cleaned)
    return cleaned.strip()[:max_length]


def sanitize_input(
    data: Any,
    max_length: int = 1000,
    path: str = "",
) -> tuple[Any, list[ValidationIssue]]:
    """
    Clean raw input recursively.

    - Strings: markup characters and dangerous protocols removed, trimmed,
      truncated to max_length
    - Numbers: NaN and infinities are reported and dropped
    - Booleans: kept
    - Mappings and sequences: cleaned element by element
    - Anything else (including None): dropped

    Returns:
        (sanitized_data, issues). Dropped values are omitted from mappings
        and sequences; a dropped top-level value becomes None.
    """
    issues: list[ValidationIssue] = []

    if isinstance(data, bool):
        return data, issues

    if isinstance(data, str):
        return sanitize_string(data, max_length), issues

    if isinstance(data, Real):
        number = data if isinstance(data, int) else float(data)
        if isinstance(number, float) and not math.isfinite(number):
            issues.append(ValidationIssue(
                field=path or "value",
                issue_type="non_finite",
                message=f"{path or 'Value'} must be a finite number",
                severity="error",
                suggested_fix="Provide a real number (not NaN or infinity)",
            ))
            return None, issues
        return number, issues

    if isinstance(data, Mapping):
        cleaned = {}
        for key, value in data.items():
            if not isinstance(key, str):
                continue
            child, child_issues = sanitize_input(value, max_length, _join(path, key))
            issues.extend(child_issues)
            if child is not None:
                cleaned[key] = child
        return cleaned, issues

    if isinstance(data, (list, tuple)):
        cleaned_items = []
        for index, item in enumerate(data):
            child, child_issues = sanitize_input(item, max_length, _join(path, index))
            issues.extend(child_issues)
            if child is not None:
                cleaned_items.append(child)
        return cleaned_items, issues

    return None, issues
