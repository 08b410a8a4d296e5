from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterator

# `zig translate-c` emits every declaration it cannot express as a
# `@compileError` constant followed by a comment line with the C location:
#
#   pub const RL_MALLOC = @compileError("unable to translate macro: undefined identifier `malloc`");
#   // raylib.h:115:9
COMPILE_ERROR_PATTERN = re.compile(
    r'^pub const (?P<name>[^\s=]+) = @compileError\("(?P<message>(?:[^"\\\r\n]|\\.)*)"\)[^\r\n]*\r?\n'
    r"//[^\r\n]*?:(?P<line>\d+):(?P<column>\d+)[^\r\n]*(?:\r?\n|\Z)",
    re.MULTILINE,
)


@dataclass(frozen=True)
class CompileErrorDiagnostic:
    name: str
    message: str
    line: int
    column: int
    full_text: str
    start: int
    end: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "message": self.message,
            "line": self.line,
            "column": self.column,
        }

    @classmethod
    def from_match(cls, match: re.Match[str]) -> "CompileErrorDiagnostic":
        return cls(
            name=match.group("name"),
            message=match.group("message"),
            line=int(match.group("line")),
            column=int(match.group("column")),
            full_text=match.group(0),
            start=match.start(),
            end=match.end(),
        )


def iter_compile_errors(source: str) -> Iterator[CompileErrorDiagnostic]:
    for match in COMPILE_ERROR_PATTERN.finditer(source):
        yield CompileErrorDiagnostic.from_match(match)


def scan_compile_errors(source: str | None) -> list[CompileErrorDiagnostic]:
    if not source:
        return []
    return list(iter_compile_errors(source))


def diagnostics_by_name(diagnostics: list[CompileErrorDiagnostic]) -> dict[str, CompileErrorDiagnostic]:
    return {diagnostic.name: diagnostic for diagnostic in diagnostics}
