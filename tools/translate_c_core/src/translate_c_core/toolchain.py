from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from .common import ToolchainError, smart_str

LOCAL_INSTALL_DIR = "zig-compiler"


@dataclass(frozen=True)
class ZigInvocation:
    command: tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.stderr.strip()

    @property
    def output(self) -> str:
        return self.stdout.rstrip("\r\n")

    @property
    def command_line(self) -> str:
        return " ".join(shlex.quote(item) for item in self.command)


def _local_install_path(base_dir: Path) -> Path:
    executable = "zig.exe" if os.name == "nt" else "zig"
    return base_dir / LOCAL_INSTALL_DIR / executable


def _resolve_zig_candidate(candidate: str) -> str | None:
    expanded = os.path.expanduser(os.path.expandvars(candidate.strip()))
    if not expanded:
        return None
    if "/" not in expanded and "\\" not in expanded:
        return shutil.which(expanded)

    # A path to the executable itself, not a directory holding it.
    zig_path = Path(expanded)
    return str(zig_path) if zig_path.is_file() else None


def zig_command_candidates(explicit: str | None = None, base_dir: Path | None = None) -> list[str]:
    candidates: list[str] = []
    if explicit and explicit.strip():
        candidates.append(explicit.strip())
    env_value = os.environ.get("ZIG")
    if isinstance(env_value, str) and env_value.strip():
        candidates.append(env_value.strip())
    candidates.append(str(_local_install_path(base_dir or Path.cwd())))
    candidates.append("zig")

    out: list[str] = []
    for candidate in candidates:
        if candidate not in out:
            out.append(candidate)
    return out


def resolve_zig_command(explicit: str | None = None, base_dir: Path | None = None) -> str:
    """Locate the zig executable.

    Looks at, in order: ``explicit``, the ``ZIG`` environment variable, a local
    ``zig-compiler`` folder and ``zig`` on PATH.
    """
    candidates = zig_command_candidates(explicit, base_dir)
    for candidate in candidates:
        resolved = _resolve_zig_candidate(candidate)
        if resolved:
            return resolved
    raise ToolchainError(
        "zig compiler not found; tried: " + ", ".join(candidates) + ". Pass --zig or set ZIG."
    )


def run_zig(*args: Any, zig_command: str | None = None, timeout: float | None = None) -> ZigInvocation:
    command = (zig_command or resolve_zig_command(),) + tuple(smart_str(arg) for arg in args)
    try:
        proc = subprocess.run(list(command), capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        raise ToolchainError(f"zig timed out after {timeout}s: {' '.join(shlex.quote(item) for item in command)}") from exc
    except OSError as exc:
        raise ToolchainError(f"Unable to run zig '{command[0]}': {exc}") from exc
    return ZigInvocation(command=command, exit_code=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)


def translate_header(
    header: Path,
    args: Iterable[str] = (),
    include_dirs: Iterable[str] = (),
    defines: Iterable[str] = (),
    zig_command: str | None = None,
    timeout: float | None = None,
) -> str:
    if not header.is_file():
        raise ToolchainError(f"Header not found: '{header}'")

    zig_args: list[str] = ["translate-c", str(header)]
    for include_dir in include_dirs:
        zig_args.extend(["-I", str(include_dir)])
    for define in defines:
        zig_args.append(f"-D{define}")
    zig_args.extend(args)

    invocation = run_zig(*zig_args, zig_command=zig_command, timeout=timeout)
    if invocation.exit_code != 0:
        message = invocation.stderr.strip() or invocation.stdout.strip() or "unknown translate-c error"
        raise ToolchainError(
            f"zig translate-c failed (exit {invocation.exit_code}). "
            f"command={invocation.command_line}; error={message}"
        )
    return invocation.stdout
