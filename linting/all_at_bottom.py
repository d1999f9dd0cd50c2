#!/usr/bin/env python
"""Check that `__all__` is assigned once, as a literal, as the last top-level statement.

Modules without `__all__` are skipped. Mutations (`+=`, `.append`, `.extend`,
`del`) and self-referencing definitions are rejected.
"""

from __future__ import annotations

import ast
import sys
import argparse
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
DEFAULT_DIRS = ("tsslink", "tests")


def _names_all(node: ast.AST) -> bool:
    return isinstance(node, ast.Name) and node.id == "__all__"


def _is_definition(node: ast.stmt) -> bool:
    if isinstance(node, ast.Assign):
        return len(node.targets) == 1 and _names_all(node.targets[0])
    if isinstance(node, ast.AnnAssign):
        return _names_all(node.target) and node.value is not None
    return False


def _is_mutation(node: ast.stmt) -> bool:
    if isinstance(node, ast.Assign):
        return any(_names_all(t) for t in node.targets) and not _is_definition(node)
    if isinstance(node, ast.AugAssign):
        return _names_all(node.target)
    if isinstance(node, ast.Delete):
        return any(_names_all(t) for t in node.targets)
    if isinstance(node, ast.Expr) and isinstance(node.value, ast.Call):
        func = node.value.func
        return isinstance(func, ast.Attribute) and _names_all(func.value)
    return False


def _label(node: ast.stmt) -> str:
    name = getattr(node, "name", None)
    if name:
        return f"{type(node).__name__} `{name}`"
    return type(node).__name__


def check_file(path: Path, root: Path) -> list[str]:
    try:
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    except (OSError, UnicodeDecodeError, SyntaxError):
        return []

    rel = path.relative_to(root)
    definitions = [(idx, node) for idx, node in enumerate(tree.body) if _is_definition(node)]
    mutations = [node for node in tree.body if _is_mutation(node)]
    if not definitions and not mutations:
        return []

    problems = [f"  {rel}:{node.lineno} `__all__` mutated; assign it once at the bottom" for node in mutations]
    if len(definitions) != 1:
        if not definitions:
            problems.append(f"  {rel}: `__all__` must be a single top-level assignment")
        for _, node in definitions:
            problems.append(f"  {rel}:{node.lineno} `__all__` assigned more than once")
        return problems

    idx, node = definitions[0]
    value = getattr(node, "value", None)
    if value is not None and any(_names_all(n) for n in ast.walk(value)):
        problems.append(f"  {rel}:{node.lineno} `__all__` built from itself")
    for trailing in tree.body[idx + 1 :]:
        problems.append(f"  {rel}:{trailing.lineno} {_label(trailing)} after `__all__`")
    return problems


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Require a single `__all__` at the bottom of each module.")
    parser.add_argument("--dirs", nargs="+", default=list(DEFAULT_DIRS), help="Directories to scan")
    parser.add_argument("--root", default=str(ROOT), help="Project root")
    args = parser.parse_args(argv)

    root = Path(args.root).resolve()
    problems: list[str] = []
    for name in args.dirs:
        base = root / name
        if not base.is_dir():
            continue
        for path in sorted(base.rglob("*.py")):
            if "__pycache__" not in path.parts:
                problems.extend(check_file(path, root))

    if problems:
        print("__all__ placement violations:", file=sys.stderr)
        print("\n".join(problems), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
