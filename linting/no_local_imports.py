#!/usr/bin/env python
"""Reject imports inside functions and classes in the transport, protocol and client packages.

Every dependency of a connection is imported when its module loads, never on
first use inside a handler or reader task.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
TARGET_DIRS = (
    ROOT / "tsslink" / "transport",
    ROOT / "tsslink" / "protocol",
    ROOT / "tsslink" / "client",
)

_SCOPES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef, ast.Lambda)


def local_imports(path: Path) -> list[int]:
    """Line numbers of imports nested in a function, lambda or class body."""
    try:
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    except (OSError, UnicodeDecodeError, SyntaxError):
        return []
    lines: list[int] = []
    for scope in ast.walk(tree):
        if not isinstance(scope, _SCOPES):
            continue
        for node in ast.walk(scope):
            if isinstance(node, (ast.Import, ast.ImportFrom)):
                lines.append(node.lineno)
    return sorted(set(lines))


def main(argv: list[str] | None = None) -> int:
    bases = [Path(arg).resolve() for arg in argv] if argv else list(TARGET_DIRS)
    problems: list[str] = []
    for base in bases:
        if not base.is_dir():
            continue
        for path in sorted(base.rglob("*.py")):
            if "__pycache__" in path.parts:
                continue
            problems.extend(f"  {path}:{line} local import" for line in local_imports(path))

    if problems:
        print("Local import violations:", file=sys.stderr)
        print("\n".join(problems), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
