#!/usr/bin/env python
"""Allow at most one top-level non-dataclass class per package module."""

from __future__ import annotations

import ast
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE_DIR = ROOT / "tsslink"


def _decorator_name(decorator: ast.expr) -> str | None:
    target = decorator.func if isinstance(decorator, ast.Call) else decorator
    if isinstance(target, ast.Name):
        return target.id
    if isinstance(target, ast.Attribute):
        return target.attr
    return None


def plain_classes(path: Path) -> list[str]:
    """Top-level classes in `path` that are not dataclasses."""
    try:
        tree = ast.parse(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, SyntaxError):
        return []
    return [
        node.name
        for node in tree.body
        if isinstance(node, ast.ClassDef)
        and not any(_decorator_name(d) == "dataclass" for d in node.decorator_list)
    ]


def main(argv: list[str] | None = None) -> int:
    base = Path(argv[0]).resolve() if argv else PACKAGE_DIR
    problems: list[str] = []
    for path in sorted(base.rglob("*.py")):
        classes = plain_classes(path)
        if len(classes) > 1:
            problems.append(f"  {path.relative_to(base.parent)}: {', '.join(classes)}")

    if problems:
        print("More than one non-dataclass class per file:", file=sys.stderr)
        print("\n".join(problems), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
