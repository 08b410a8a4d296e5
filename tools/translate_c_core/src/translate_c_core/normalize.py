from __future__ import annotations

import re

DEFAULT_PARAM_NAMES_PREFIX = "__fn_param_names_"

# Declarations only count at the start of a line; commented-out text is left alone.
_STRUCT_THEN_ALIAS = re.compile(
    r"^pub const struct_(?P<struct>[^\s=;]+) = (?P<body>[^;]+?);\r?\n"
    r"pub const (?P<alias>[^\s=;]+) = struct_(?P<target>[^\s=;]+);",
    re.MULTILINE,
)
_ALIAS_THEN_STRUCT = re.compile(
    r"^pub const (?P<alias>[^\s=;]+) = struct_(?P<target>[^\s=;]+);\r?\n"
    r"pub const struct_(?P<struct>[^\s=;]+) = (?P<body>[^;]+?);",
    re.MULTILINE,
)
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_EXTERN_FN = re.compile(r'^pub extern fn (?P<name>@"[^"]*"|[A-Za-z_][A-Za-z0-9_]*)\s*\(', re.MULTILINE)
_CONST_NAME = re.compile(r'^pub const (?P<name>@"[^"]*"|[^\s=]+) = ', re.MULTILINE)
_PARAM_QUALIFIERS = ("noalias", "comptime")

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}


def collapse_duplicate_types(source: str) -> str:
    # Folds only when struct, alias and target names agree; leftover references are renamed.
    collapsed: list[str] = []

    def _fold(match: re.Match[str]) -> str:
        name = match.group("struct")
        if not (name == match.group("alias") == match.group("target")):
            return match.group(0)
        collapsed.append(name)
        return f"pub const {name} = {match.group('body')};"

    text = _STRUCT_THEN_ALIAS.sub(_fold, source)
    text = _ALIAS_THEN_STRUCT.sub(_fold, text)

    renamable = sorted({name for name in collapsed if _IDENTIFIER.fullmatch(name)})
    if renamable:
        references = re.compile(r"\bstruct_(" + "|".join(re.escape(name) for name in renamable) + r")\b")
        text = references.sub(lambda match: match.group(1), text)
    return text


def _find_closing(text: str, open_idx: int) -> int | None:
    stack: list[str] = []
    in_string = False
    idx = open_idx
    while idx < len(text):
        ch = text[idx]
        if in_string:
            if ch == "\\":
                idx += 1
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return idx
        idx += 1
    return None


def _find_terminator(text: str, start: int) -> int | None:
    depth = 0
    in_string = False
    idx = start
    while idx < len(text):
        ch = text[idx]
        if in_string:
            if ch == "\\":
                idx += 1
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == ";" and depth <= 0:
            return idx
        idx += 1
    return None


def split_top_level(text: str, separator: str = ",") -> list[str]:
    parts: list[str] = []
    depth = 0
    in_string = False
    current: list[str] = []
    idx = 0
    while idx < len(text):
        ch = text[idx]
        if in_string:
            if ch == "\\" and idx + 1 < len(text):
                current.append(ch)
                idx += 1
                ch = text[idx]
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == separator and depth == 0:
            parts.append("".join(current))
            current = []
            idx += 1
            continue
        current.append(ch)
        idx += 1
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


def _clean_identifier(value: str) -> str:
    return value.replace('"', "").replace("@", "").strip()


def _declared_name(name: str) -> str:
    if _IDENTIFIER.fullmatch(name):
        return name
    return f'@"{name}"'


def _line_ending(text: str, idx: int) -> str:
    newline = text.find("\n", idx)
    if newline == -1:
        newline = text.rfind("\n")
    if newline > 0 and text[newline - 1] == "\r":
        return "\r\n"
    return "\n"


def extract_parameter_names(param_list: str) -> list[str]:
    # Unnamed parameters and `...` have no `name:` part and are skipped.
    names: list[str] = []
    for param in split_top_level(param_list, ","):
        parts = split_top_level(param, ":")
        if len(parts) < 2:
            continue
        tokens = [token for token in parts[0].split() if token not in _PARAM_QUALIFIERS]
        if not tokens:
            continue
        name = _clean_identifier(tokens[-1])
        if name:
            names.append(name)
    return names


def param_names_declaration(name: str, param_names: list[str]) -> str:
    values = ", ".join(f'"{item}"' for item in param_names)
    return f"pub const {_declared_name(name)} = [_][]const u8{{{values}}};"


def _existing_metadata(source: str, anchor_name: str) -> set[str]:
    names = (_clean_identifier(match.group("name")) for match in _CONST_NAME.finditer(source))
    return {name for name in names if name.startswith(anchor_name)}


def add_function_parameter_info(source: str, prefix: str = DEFAULT_PARAM_NAMES_PREFIX) -> str:
    """Put a list of parameter names on the line above every ``pub extern fn``.

    An empty anchor list named after the prefix is appended once at the end.
    """
    anchor_name = prefix.rstrip("_") or prefix
    existing = _existing_metadata(source, anchor_name)

    pieces: list[str] = []
    cursor = 0
    search_from = 0
    while True:
        match = _EXTERN_FN.search(source, search_from)
        if not match:
            break
        open_idx = match.end() - 1
        close_idx = _find_closing(source, open_idx)
        end_idx = _find_terminator(source, close_idx + 1) if close_idx is not None else None
        if close_idx is None or end_idx is None:
            search_from = match.end()
            continue
        search_from = end_idx + 1

        metadata_name = f"{prefix}{_clean_identifier(match.group('name'))}"
        if metadata_name in existing:
            continue
        param_names = extract_parameter_names(source[open_idx + 1 : close_idx])
        if not param_names:
            continue
        existing.add(metadata_name)
        pieces.append(source[cursor : match.start()])
        pieces.append(param_names_declaration(metadata_name, param_names) + _line_ending(source, end_idx))
        cursor = match.start()

    pieces.append(source[cursor:])
    text = "".join(pieces)

    if anchor_name not in existing:
        newline = _line_ending(text, max(len(text) - 1, 0))
        if text and not text.endswith("\n"):
            text += newline
        text += param_names_declaration(anchor_name, []) + newline
    return text


def post_process_translation(source: str, prefix: str = DEFAULT_PARAM_NAMES_PREFIX) -> str:
    return add_function_parameter_info(collapse_duplicate_types(source), prefix=prefix)
