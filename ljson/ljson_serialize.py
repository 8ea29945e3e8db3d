"""Decoding of plain-data documents (JSON or YAML) given on the command line."""
from __future__ import annotations

import json
from typing import Any, Optional

import yaml


def detect_format(text: str) -> Optional[str]:
    """
    Returns 'json' or 'yaml' by sniffing the text, or None when it is blank.
    """
    s = text.lstrip()
    if s.startswith('{') or s.startswith('[') or s.startswith('"'):
        # Try JSON first; if it fails, YAML is a superset
        return 'json'
    if s:
        return 'yaml'
    return None


def deserialize(text: str) -> Any:
    """
    Convert an argument string to plain Python structures.
    Returns dict/list/scalars; returns the raw text when nothing parses.
    """
    f = detect_format(text)
    if f == 'json':
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Fallback to YAML if it looks like JSON but is actually YAML-like
            pass
    if f is not None:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError:
            return text
    return text


__all__ = [
    "deserialize",
    "detect_format",
]
