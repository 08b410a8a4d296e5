from __future__ import annotations

from pathlib import Path
from typing import Any

from .policy import (
    ACTION_BENIGN,
    ACTION_REPLACED,
    ACTION_UNDERSCORE,
    RepairResult,
)


def build_report(result: RepairResult, source_label: str | None = None) -> dict[str, Any]:
    unresolved = result.unresolved_by_name
    return {
        "status": "pass" if result.ok else "fail",
        "source": source_label,
        "diagnostic_count": len(result.resolutions),
        "replaced": [item.diagnostic.name for item in result.resolutions if item.action == ACTION_REPLACED],
        "suppressed": [
            item.diagnostic.name
            for item in result.resolutions
            if item.action in {ACTION_UNDERSCORE, ACTION_BENIGN}
        ],
        "unresolved": {name: unresolved[name].as_dict() for name in sorted(unresolved)},
    }


def summary_line(result: RepairResult, label: str) -> str:
    suppressed = result.count(ACTION_UNDERSCORE) + result.count(ACTION_BENIGN)
    return (
        f"[{label}] diagnostics={len(result.resolutions)} replaced={result.count(ACTION_REPLACED)} "
        f"suppressed={suppressed} unresolved={len(result.unresolved)}"
    )


def print_report(report: dict[str, Any]) -> None:
    print(f"translate-c repair status: {report.get('status', 'unknown')}")
    print(f"Diagnostics: {report.get('diagnostic_count', 0)}")
    print(f"Replaced: {len(report.get('replaced', []))}")
    print(f"Suppressed: {len(report.get('suppressed', []))}")

    unresolved = report.get("unresolved", {})
    if unresolved:
        print("Unresolved declarations:")
        for name, item in unresolved.items():
            print(f"  - {name} (line {item['line']}, column {item['column']}): {item['message']}")


def write_markdown_report(path: Path, report: dict[str, Any]) -> None:
    lines: list[str] = []
    lines.append(f"# translate-c Repair Report ({report.get('status', 'unknown')})")
    lines.append("")
    if report.get("source"):
        lines.append(f"- Source: `{report['source']}`")
    lines.append(f"- Diagnostics: `{report.get('diagnostic_count', 0)}`")
    lines.append(f"- Replaced: `{len(report.get('replaced', []))}`")
    lines.append(f"- Suppressed: `{len(report.get('suppressed', []))}`")
    lines.append("")

    unresolved = report.get("unresolved", {})
    if unresolved:
        lines.append("## Unresolved")
        lines.append("")
        lines.append("| Declaration | Line | Column | Message |")
        lines.append("| --- | --- | --- | --- |")
        for name, item in unresolved.items():
            message = str(item["message"]).replace("|", "\\|")
            lines.append(f"| `{name}` | {item['line']} | {item['column']} | {message} |")
        lines.append("")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
