from .common import ConfigError, ToolchainError, TranslateCError, smart_str, write_if_changed
from .config import PolicyConfig, load_replacement_policy, policy_from_dict
from .diagnostics import CompileErrorDiagnostic, scan_compile_errors
from .normalize import (
    add_function_parameter_info,
    collapse_duplicate_types,
    extract_parameter_names,
    post_process_translation,
)
from .pipeline import process_translation, translate_c_header
from .policy import (
    BENIGN_UNTRANSLATABLES,
    LiteralReplacement,
    LookupReplacement,
    RepairResult,
    ReplacementPolicy,
    RuleReplacement,
    UnresolvedDiagnosticsError,
    repair_or_raise,
    repair_translation,
    resolve_diagnostic,
)
from .toolchain import resolve_zig_command, run_zig, translate_header

__all__ = [
    "BENIGN_UNTRANSLATABLES",
    "CompileErrorDiagnostic",
    "ConfigError",
    "LiteralReplacement",
    "LookupReplacement",
    "PolicyConfig",
    "RepairResult",
    "ReplacementPolicy",
    "RuleReplacement",
    "ToolchainError",
    "TranslateCError",
    "UnresolvedDiagnosticsError",
    "add_function_parameter_info",
    "collapse_duplicate_types",
    "extract_parameter_names",
    "load_replacement_policy",
    "policy_from_dict",
    "post_process_translation",
    "process_translation",
    "repair_or_raise",
    "repair_translation",
    "resolve_diagnostic",
    "resolve_zig_command",
    "run_zig",
    "scan_compile_errors",
    "smart_str",
    "translate_c_header",
    "translate_header",
    "write_if_changed",
]
