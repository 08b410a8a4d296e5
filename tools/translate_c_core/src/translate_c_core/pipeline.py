from __future__ import annotations

from pathlib import Path
from typing import Any

from .normalize import DEFAULT_PARAM_NAMES_PREFIX, post_process_translation
from .policy import RepairResult, ReplacementPolicy, repair_translation
from .toolchain import translate_header


def process_translation(
    source: str | None,
    policy: ReplacementPolicy | None = None,
    normalize: bool = True,
    param_names_prefix: str = DEFAULT_PARAM_NAMES_PREFIX,
) -> RepairResult:
    result = repair_translation(source, policy)
    if result.ok and normalize:
        result.source = post_process_translation(result.source or "", prefix=param_names_prefix)
    return result


def translate_c_header(
    header: Path,
    policy: ReplacementPolicy | None = None,
    normalize: bool = True,
    param_names_prefix: str = DEFAULT_PARAM_NAMES_PREFIX,
    **translate_options: Any,
) -> RepairResult:
    """Translate ``header`` with ``zig translate-c`` and repair the result.

    ``translate_options`` are forwarded to :func:`translate_header`. When any
    declaration stays untranslatable the returned result has no source and its
    ``unresolved`` diagnostics should be used to refine ``policy``.

    Example::

        result = translate_c_header(
            Path("raylib.h"),
            ReplacementPolicy(compile_error_replacements={"RL_MALLOC": "", "RL_FREE": ""}),
        )
    """
    raw = translate_header(header, **translate_options)
    return process_translation(raw, policy, normalize=normalize, param_names_prefix=param_names_prefix)
