from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .common import TranslateCError, read_text, write_if_changed, write_json
from .config import PolicyConfig, load_replacement_policy
from .diagnostics import scan_compile_errors
from .normalize import DEFAULT_PARAM_NAMES_PREFIX, post_process_translation
from .pipeline import process_translation, translate_c_header
from .policy import RepairResult, ReplacementPolicy
from .reporting import build_report, print_report, summary_line, write_markdown_report


def parse_replace_overrides(values: list[str] | None) -> dict[str, str]:
    out: dict[str, str] = {}
    for value in values or []:
        name, sep, text = value.partition("=")
        if not sep or not name.strip():
            raise TranslateCError(f"--replace expects NAME=TEXT, got '{value}'")
        out[name.strip()] = text
    return out


def load_policy_config(args: argparse.Namespace) -> PolicyConfig:
    if getattr(args, "config", None):
        return load_replacement_policy(Path(args.config).resolve())
    return PolicyConfig()


def build_policy(args: argparse.Namespace, config: PolicyConfig) -> ReplacementPolicy:
    return config.to_policy(
        extra_replacements=parse_replace_overrides(args.replace),
        remove_underscore=False if args.keep_underscore else None,
        remove_benign_errors=False if args.keep_benign_errors else None,
    )


def emit_source(args: argparse.Namespace, content: str) -> int:
    if args.output:
        return write_if_changed(Path(args.output).resolve(), content, args.check, args.dry_run)
    sys.stdout.write(content)
    return 0


def finish_repair(args: argparse.Namespace, result: RepairResult, label: str, source_label: str) -> int:
    report = build_report(result, source_label)
    if args.report:
        write_json(Path(args.report).resolve(), report)
    if args.markdown_report:
        write_markdown_report(Path(args.markdown_report).resolve(), report)

    print(summary_line(result, label), file=sys.stderr)
    if not result.ok:
        print_report(report)
        return 1
    return emit_source(args, result.source or "")


def command_scan(args: argparse.Namespace) -> int:
    source = read_text(Path(args.input).resolve())
    diagnostics = scan_compile_errors(source)
    payload: dict[str, Any] = {
        "source": args.input,
        "diagnostic_count": len(diagnostics),
        "diagnostics": [item.as_dict() for item in diagnostics],
    }
    if args.output:
        write_json(Path(args.output).resolve(), payload)
    else:
        print(json.dumps(payload, indent=2, sort_keys=True))
    print(f"[scan] diagnostics={len(diagnostics)}", file=sys.stderr)
    return 0


def command_repair(args: argparse.Namespace) -> int:
    source = read_text(Path(args.input).resolve())
    config = load_policy_config(args)
    result = process_translation(
        source,
        build_policy(args, config),
        normalize=not args.no_normalize,
        param_names_prefix=config.param_names_prefix,
    )
    return finish_repair(args, result, "repair", args.input)


def command_normalize(args: argparse.Namespace) -> int:
    source = read_text(Path(args.input).resolve())
    return emit_source(args, post_process_translation(source, prefix=args.param_names_prefix))


def command_translate(args: argparse.Namespace) -> int:
    config = load_policy_config(args)
    translate = config.translate
    timeout = args.timeout if args.timeout is not None else translate.timeout_seconds
    result = translate_c_header(
        Path(args.header).resolve(),
        build_policy(args, config),
        normalize=not args.no_normalize,
        param_names_prefix=config.param_names_prefix,
        args=list(translate.args) + list(args.zig_arg or []),
        include_dirs=list(translate.include_dirs) + list(args.include_dir or []),
        defines=list(translate.defines) + list(args.define or []),
        zig_command=args.zig,
        timeout=timeout,
    )
    return finish_repair(args, result, "translate", args.header)


def _add_output_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--output", help="Write the resulting Zig source to path (default: stdout).")
    parser.add_argument("--check", action="store_true", help="Fail with a diff if --output would change.")
    parser.add_argument("--dry-run", action="store_true", help="Do not write --output.")


def _add_policy_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to replacement policy JSON.")
    parser.add_argument(
        "--replace",
        action="append",
        metavar="NAME=TEXT",
        help="Replace the untranslatable declaration NAME with TEXT (repeatable, overrides --config).",
    )
    parser.add_argument("--keep-underscore", action="store_true", help="Do not drop failing '_'-prefixed declarations.")
    parser.add_argument("--keep-benign-errors", action="store_true", help="Do not drop failing va_* helper macros.")
    parser.add_argument("--no-normalize", action="store_true", help="Skip struct alias folding and parameter metadata.")
    parser.add_argument("--report", help="Write repair report JSON to path.")
    parser.add_argument("--markdown-report", help="Write repair report as Markdown.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="translate_c",
        description="Repair and normalize 'zig translate-c' output into bindable Zig source.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="List untranslatable declarations in translate-c output.")
    scan.add_argument("--input", required=True, help="Path to translate-c output.")
    scan.add_argument("--output", help="Write diagnostics JSON to path.")
    scan.set_defaults(func=command_scan)

    repair = sub.add_parser("repair", help="Apply the replacement policy to translate-c output.")
    repair.add_argument("--input", required=True, help="Path to translate-c output.")
    _add_policy_options(repair)
    _add_output_options(repair)
    repair.set_defaults(func=command_repair)

    normalize = sub.add_parser("normalize", help="Fold struct aliases and add parameter name metadata.")
    normalize.add_argument("--input", required=True, help="Path to repaired Zig source.")
    normalize.add_argument(
        "--param-names-prefix",
        default=DEFAULT_PARAM_NAMES_PREFIX,
        help="Prefix of generated parameter name declarations.",
    )
    _add_output_options(normalize)
    normalize.set_defaults(func=command_normalize)

    translate = sub.add_parser("translate", help="Run zig translate-c on a header, then repair and normalize.")
    translate.add_argument("--header", required=True, help="Path to the C header.")
    translate.add_argument("-I", "--include-dir", action="append", help="Include directory (repeatable).")
    translate.add_argument("-D", "--define", action="append", help="Preprocessor define (repeatable).")
    translate.add_argument("--zig-arg", action="append", help="Extra argument for zig translate-c (repeatable).")
    translate.add_argument("--zig", help="zig executable (default: ZIG env, ./zig-compiler, PATH).")
    translate.add_argument("--timeout", type=float, help="Seconds to wait for zig translate-c.")
    _add_policy_options(translate)
    _add_output_options(translate)
    translate.set_defaults(func=command_translate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except TranslateCError as exc:
        print(f"translate_c error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
