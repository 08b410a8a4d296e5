from __future__ import annotations

import difflib
import enum
import json
from pathlib import Path
from typing import Any


class TranslateCError(Exception):
    pass


class ConfigError(TranslateCError):
    pass


class ToolchainError(TranslateCError):
    pass


def smart_str(value: Any) -> str:
    """Stringify a replacement value.

    Strings pass through, sequences are joined with single spaces (recursively)
    and every other value goes through ``str``.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, enum.Enum):
        return str(value.name)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    if isinstance(value, (list, tuple, set, frozenset)) or _is_generator(value):
        return " ".join(smart_str(item) for item in value)
    return str(value)


def _is_generator(value: Any) -> bool:
    return hasattr(value, "__next__") and hasattr(value, "__iter__")


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TranslateCError(f"Unable to read file '{path}': {exc}") from exc


def load_json_object(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(read_text(path))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in '{path}': {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"JSON root in '{path}' must be an object")
    return payload


def write_json(path: Path, value: dict[str, Any]) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(value, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    except OSError as exc:
        raise TranslateCError(f"Unable to write file '{path}': {exc}") from exc


def write_if_changed(path: Path, content: str, check: bool, dry_run: bool) -> int:
    """Write ``content`` to ``path`` unless it already matches.

    With ``check`` nothing is written; a unified diff is printed and 1 returned
    when the file would change.
    """
    existing = read_text(path) if path.exists() else ""
    if existing == content:
        return 0
    if check:
        diff = difflib.unified_diff(
            existing.splitlines(),
            content.splitlines(),
            fromfile=f"a/{path.name}",
            tofile=f"b/{path.name}",
            lineterm="",
        )
        print("\n".join(diff))
        return 1
    if dry_run:
        print(f"[dry-run] would write {path}")
        return 0
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise TranslateCError(f"Unable to write file '{path}': {exc}") from exc
    return 0
