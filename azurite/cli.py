"""Command-line front end: project manifests, dependencies and completion."""

from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path
from typing import Optional, Sequence

MANIFEST_NAME = "azurite.toml"

_REGISTRY_BASE = "https://github.com/AzuriteLang"
_REGISTRY = {name: f"{_REGISTRY_BASE}/{name}" for name in ("string", "math", "random", "color", "system")}

_COMPLETIONS: tuple[str, ...] = tuple(
    dict.fromkeys(
        [
            "let", "func", "if", "else", "while", "for", "in", "match", "return",
            "break", "continue", "import", "class", "enum", "true", "false", "null",
            "and", "or", "not", "self", "super", "int", "float", "string", "bool", "void",
            "print", "len", "chr", "sqrt", "abs", "int", "float",
            "sin", "cos", "tan", "asin", "acos", "atan", "atan2",
            "sinh", "cosh", "tanh", "exp", "expm1", "log", "log2", "log10",
            "pow", "hypot", "fmod", "copysign", "floor", "ceil",
            "char_at", "read", "input", "exit", "rand", "srand",
        ]
    )
)

_WORD_AT_END = re.compile(r"\w*\Z")


class CommandError(Exception):
    """A command could not be carried out."""


def find_manifest(start: Path) -> Optional[Path]:
    """Return the nearest manifest in ``start`` or one of its parents."""
    start = Path(start)
    for directory in (start, *start.parents):
        candidate = directory / MANIFEST_NAME
        if candidate.exists():
            return candidate
    return None


def registry_url(name: str) -> Optional[str]:
    """Return the repository URL of a package known to the registry."""
    return _REGISTRY.get(name)


def _project_name(directory: Path, fallback: str) -> str:
    name = directory.name
    return name if name and name not in (".", "..") else fallback


def _manifest_text(name: str, dependency_comments: str = "") -> str:
    return (
        "[package]\n"
        f'name = "{name}"\n'
        'version = "0.1.0"\n'
        "\n"
        "[dependencies]\n"
        f"{dependency_comments}"
    )


def init_project(directory: Path) -> Path:
    """Create a manifest in ``directory`` and return its path."""
    directory = Path(directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CommandError(f"cannot create directory: {exc}") from exc
    manifest_path = directory / MANIFEST_NAME
    if manifest_path.exists():
        raise CommandError(f"{MANIFEST_NAME} already exists in {directory}")
    comments = (
        f'# string = {{ git = "{registry_url("string")}" }}\n'
        f'# math  = {{ git = "{registry_url("math")}" }}\n'
    )
    content = _manifest_text(_project_name(directory, "azurite_project"), comments)
    try:
        manifest_path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise CommandError(f"cannot write {MANIFEST_NAME}: {exc}") from exc
    return manifest_path


def _dependency_line(name: str, git_url: str, path: Optional[str], rev: Optional[str]) -> str:
    key, value = ("path", path) if path is not None else ("git", git_url)
    if rev is not None:
        return f'{name} = {{ {key} = "{value}", rev = "{rev}" }}'
    return f'{name} = {{ {key} = "{value}" }}'


def install_dependency(
    name: str,
    git: Optional[str] = None,
    path: Optional[str] = None,
    rev: Optional[str] = None,
    cwd: Optional[Path] = None,
) -> Path:
    """Add a dependency to the nearest manifest and return the manifest's path."""
    cwd = Path.cwd() if cwd is None else Path(cwd)
    manifest_path = find_manifest(cwd) or cwd / MANIFEST_NAME
    if manifest_path.exists():
        try:
            content = manifest_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CommandError(f"cannot read {manifest_path}: {exc}") from exc
    else:
        content = _manifest_text(_project_name(cwd, "project"))

    if git is not None:
        git_url = git
    elif path is not None:
        git_url = ""
    else:
        found = registry_url(name)
        if found is None:
            raise CommandError(
                f"unknown package '{name}'. Use --git <url> or --path <path>"
            )
        git_url = found

    dep_line = _dependency_line(name, git_url, path, rev)

    if any(line.strip().startswith(f"{name} =") for line in content.splitlines()):
        raise CommandError(f"dependency '{name}' already exists in {MANIFEST_NAME}")

    header = "[dependencies]"
    deps_pos = content.find(header)
    if deps_pos >= 0:
        body_start = deps_pos + len(header) + 1
        last_newline = content[body_start:].rfind("\n")
        insert_pos = body_start + last_newline + 1 if last_newline >= 0 else len(content)
        content = content[:insert_pos] + "\n" + dep_line + content[insert_pos:]
    else:
        content += f"\n{header}\n{dep_line}\n"

    try:
        manifest_path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise CommandError(f"cannot write {manifest_path}: {exc}") from exc
    return manifest_path


def complete_word(line: str, pos: int) -> tuple[int, list[str]]:
    """Complete the word ending at ``pos``; return its start and the candidates."""
    prefix = line[:pos]
    match = _WORD_AT_END.search(prefix)
    word = match.group() if match else ""
    candidates = [c for c in _COMPLETIONS if c.startswith(word)]
    return pos - len(word), candidates


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="azurite", description="AzuriteLang compiler")
    commands = parser.add_subparsers(dest="command", required=True)

    init = commands.add_parser("init", help="Initialize a new Azurite project with azurite.toml")
    init.add_argument("dir", nargs="?", default=".")

    install = commands.add_parser("install", help="Install a dependency (from registry or custom)")
    install.add_argument("name")
    install.add_argument("--git", help="Git URL")
    install.add_argument("--path", help="Local path")
    install.add_argument("--rev", help="Git revision")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line; return the exit status."""
    args = _build_parser().parse_args(argv)
    try:
        if args.command == "init":
            created = init_project(Path(args.dir))
            print(f"Created {created}")
        else:
            manifest = install_dependency(args.name, args.git, args.path, args.rev)
            print(f"Added '{args.name}' to {manifest}")
    except CommandError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())