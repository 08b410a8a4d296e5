from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from .common import TranslateCError, smart_str
from .diagnostics import (
    COMPILE_ERROR_PATTERN,
    CompileErrorDiagnostic,
    diagnostics_by_name,
    scan_compile_errors,
)

# Variadic-argument helpers translate-c can never express.
BENIGN_UNTRANSLATABLES = frozenset({"va_start", "va_end", "va_arg", "va_copy"})

ACTION_REPLACED = "replaced"
ACTION_UNDERSCORE = "underscore"
ACTION_BENIGN = "benign"
ACTION_UNRESOLVED = "unresolved"


def _is_present(value: Any) -> bool:
    # "" is a real replacement (delete the declaration); only None/False decline.
    return value is not None and value is not False


class Replacement:
    def resolve(self, diagnostic: CompileErrorDiagnostic) -> str | None:
        raise NotImplementedError


@dataclass(frozen=True)
class LiteralReplacement(Replacement):
    value: Any

    def resolve(self, diagnostic: CompileErrorDiagnostic) -> str | None:
        return smart_str(self.value)


@dataclass(frozen=True)
class LookupReplacement(Replacement):
    mapping: Mapping[str, Any]

    def resolve(self, diagnostic: CompileErrorDiagnostic) -> str | None:
        value = self.mapping.get(diagnostic.name)
        if not _is_present(value):
            return None
        return coerce_replacement(value).resolve(diagnostic)


@dataclass(frozen=True)
class RuleReplacement(Replacement):
    function: Callable[[CompileErrorDiagnostic], Any]

    def resolve(self, diagnostic: CompileErrorDiagnostic) -> str | None:
        value = self.function(diagnostic)
        if not _is_present(value):
            return None
        return coerce_replacement(value).resolve(diagnostic)


def coerce_replacement(value: Any) -> Replacement:
    if isinstance(value, Replacement):
        return value
    if isinstance(value, Mapping):
        return LookupReplacement(value)
    if callable(value):
        return RuleReplacement(value)
    return LiteralReplacement(value)


@dataclass(frozen=True)
class ReplacementPolicy:
    remove_underscore: bool = True
    remove_benign_errors: bool = True
    compile_error_replacements: Any = field(default_factory=dict)
    benign_untranslatables: frozenset[str] = BENIGN_UNTRANSLATABLES

    def replacement(self) -> Replacement:
        if self.compile_error_replacements is None:
            return LookupReplacement({})
        return coerce_replacement(self.compile_error_replacements)


@dataclass(frozen=True)
class Resolution:
    diagnostic: CompileErrorDiagnostic
    action: str
    replacement: str


@dataclass
class RepairResult:
    source: str | None
    unresolved: list[CompileErrorDiagnostic] = field(default_factory=list)
    resolutions: list[Resolution] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.source is not None

    @property
    def unresolved_by_name(self) -> dict[str, CompileErrorDiagnostic]:
        return diagnostics_by_name(self.unresolved)

    def count(self, action: str) -> int:
        return sum(1 for item in self.resolutions if item.action == action)


class UnresolvedDiagnosticsError(TranslateCError):
    def __init__(self, unresolved: dict[str, CompileErrorDiagnostic]) -> None:
        self.unresolved = unresolved
        names = ", ".join(sorted(unresolved))
        super().__init__(f"{len(unresolved)} declaration(s) could not be translated: {names}")


def resolve_diagnostic(
    diagnostic: CompileErrorDiagnostic,
    policy: ReplacementPolicy,
    replacement: Replacement | None = None,
) -> Resolution:
    if replacement is None:
        replacement = policy.replacement()

    candidate = replacement.resolve(diagnostic)
    if candidate is not None:
        return Resolution(diagnostic, ACTION_REPLACED, candidate)
    if policy.remove_underscore and diagnostic.name.startswith("_"):
        return Resolution(diagnostic, ACTION_UNDERSCORE, "")
    if policy.remove_benign_errors and diagnostic.name in policy.benign_untranslatables:
        return Resolution(diagnostic, ACTION_BENIGN, "")
    return Resolution(diagnostic, ACTION_UNRESOLVED, diagnostic.full_text)


def repair_translation(source: str | None, policy: ReplacementPolicy | None = None) -> RepairResult:
    """Replace every ``@compileError`` declaration, then rescan for leftovers."""
    if policy is None:
        policy = ReplacementPolicy()
    text = source or ""
    replacement = policy.replacement()
    resolutions: list[Resolution] = []

    def _substitute(match: re.Match[str]) -> str:
        resolution = resolve_diagnostic(CompileErrorDiagnostic.from_match(match), policy, replacement)
        resolutions.append(resolution)
        return resolution.replacement

    repaired = COMPILE_ERROR_PATTERN.sub(_substitute, text)
    remaining = scan_compile_errors(repaired)
    if remaining:
        return RepairResult(source=None, unresolved=remaining, resolutions=resolutions)
    return RepairResult(source=repaired, resolutions=resolutions)


def repair_or_raise(source: str | None, policy: ReplacementPolicy | None = None) -> str:
    result = repair_translation(source, policy)
    if not result.ok:
        raise UnresolvedDiagnosticsError(result.unresolved_by_name)
    return result.source or ""
