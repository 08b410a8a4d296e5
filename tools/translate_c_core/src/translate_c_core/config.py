from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema

from .common import ConfigError, load_json_object
from .diagnostics import CompileErrorDiagnostic
from .normalize import DEFAULT_PARAM_NAMES_PREFIX
from .policy import BENIGN_UNTRANSLATABLES, LookupReplacement, ReplacementPolicy

POLICY_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "replacement_policy.schema.json"


@dataclass(frozen=True)
class PatternRule:
    pattern: re.Pattern[str]
    replacement: Any
    match: str = "name"

    def __call__(self, diagnostic: CompileErrorDiagnostic) -> Any:
        subject = diagnostic.message if self.match == "message" else diagnostic.name
        if self.pattern.search(subject):
            return self.replacement
        return None


@dataclass(frozen=True)
class ConfiguredReplacements:
    """Exact-name replacements first, then the first matching pattern rule."""

    replacements: dict[str, Any]
    rules: tuple[PatternRule, ...]

    def __call__(self, diagnostic: CompileErrorDiagnostic) -> Any:
        value = LookupReplacement(self.replacements).resolve(diagnostic)
        if value is not None:
            return value
        for rule in self.rules:
            value = rule(diagnostic)
            if value is not None and value is not False:
                return value
        return None


@dataclass(frozen=True)
class TranslateOptions:
    include_dirs: tuple[str, ...] = ()
    defines: tuple[str, ...] = ()
    args: tuple[str, ...] = ()
    timeout_seconds: float | None = None


@dataclass(frozen=True)
class PolicyConfig:
    remove_underscore: bool = True
    remove_benign_errors: bool = True
    replacements: dict[str, Any] = field(default_factory=dict)
    rules: tuple[PatternRule, ...] = ()
    param_names_prefix: str = DEFAULT_PARAM_NAMES_PREFIX
    translate: TranslateOptions = TranslateOptions()

    def to_policy(
        self,
        extra_replacements: dict[str, Any] | None = None,
        remove_underscore: bool | None = None,
        remove_benign_errors: bool | None = None,
    ) -> ReplacementPolicy:
        replacements = dict(self.replacements)
        if extra_replacements:
            replacements.update(extra_replacements)
        compile_error_replacements: Any = replacements
        if self.rules:
            compile_error_replacements = ConfiguredReplacements(replacements, self.rules)
        return ReplacementPolicy(
            remove_underscore=self.remove_underscore if remove_underscore is None else remove_underscore,
            remove_benign_errors=self.remove_benign_errors if remove_benign_errors is None else remove_benign_errors,
            compile_error_replacements=compile_error_replacements,
            benign_untranslatables=BENIGN_UNTRANSLATABLES,
        )


def _format_path(path: Any) -> str:
    out = "$"
    for item in path:
        out += f"[{item}]" if isinstance(item, int) else f".{item}"
    return out


def validate_policy_payload(payload: dict[str, Any]) -> None:
    schema = load_json_object(POLICY_SCHEMA_PATH)
    validator = jsonschema.Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(payload), key=lambda error: [str(item) for item in error.absolute_path])
    if errors:
        details = "; ".join(f"{_format_path(error.absolute_path)}: {error.message}" for error in errors)
        raise ConfigError(f"Invalid replacement policy config: {details}")


def _normalize_rules(raw_rules: list[dict[str, Any]]) -> tuple[PatternRule, ...]:
    out: list[PatternRule] = []
    for idx, item in enumerate(raw_rules):
        pattern_text = str(item["pattern"])
        try:
            pattern = re.compile(pattern_text)
        except re.error as exc:
            raise ConfigError(
                f"replacement_rules[{idx}].pattern is invalid regex: {pattern_text} ({exc})"
            ) from exc
        out.append(PatternRule(pattern=pattern, replacement=item["replacement"], match=str(item.get("match", "name"))))
    return tuple(out)


def policy_from_dict(payload: dict[str, Any]) -> PolicyConfig:
    validate_policy_payload(payload)
    translate = payload.get("translate") or {}
    timeout = translate.get("timeout_seconds")
    return PolicyConfig(
        remove_underscore=bool(payload.get("remove_underscore", True)),
        remove_benign_errors=bool(payload.get("remove_benign_errors", True)),
        replacements=dict(payload.get("compile_error_replacements") or {}),
        rules=_normalize_rules(payload.get("replacement_rules") or []),
        param_names_prefix=str(payload.get("param_names_prefix", DEFAULT_PARAM_NAMES_PREFIX)),
        translate=TranslateOptions(
            include_dirs=tuple(translate.get("include_dirs") or ()),
            defines=tuple(translate.get("defines") or ()),
            args=tuple(translate.get("args") or ()),
            timeout_seconds=float(timeout) if timeout is not None else None,
        ),
    )


def load_replacement_policy(path: Path) -> PolicyConfig:
    return policy_from_dict(load_json_object(path))
