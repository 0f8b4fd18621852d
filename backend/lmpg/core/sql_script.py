"""SQL Script Parsing — splits migration files into executable statements.

Invariants:
    - Full-line `--` comments are removed before splitting
    - `;` inside single- or double-quoted literals does not end a statement
    - Empty and comment-only statements are dropped; statement text is trimmed
"""

import re

VERSION_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
# migrations.version column width
MAX_VERSION_LENGTH = 50


def version_from_filename(filename: str) -> str:
    return filename[:-4] if filename.endswith(".sql") else filename


def is_valid_version(version: str) -> bool:
    """Reject anything that could escape the migrations directory or overflow the record."""
    return (
        len(version) <= MAX_VERSION_LENGTH
        and bool(VERSION_RE.match(version))
        and ".." not in version
    )


def describe_migration(version: str, sql: str) -> str:
    """First `--` comment line of the file, else a generic label."""
    for line in sql.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("--"):
            text = stripped.lstrip("-").strip()
            if text:
                return text
            continue
        break
    return f"Migration {version}"


def _strip_comment_lines(sql: str) -> str:
    return "\n".join(
        line for line in sql.splitlines()
        if not line.strip().startswith("--")
    )


def split_statements(sql: str) -> list[str]:
    """Split a script on top-level semicolons."""
    statements: list[str] = []
    current: list[str] = []
    quote: str | None = None
    for char in _strip_comment_lines(sql):
        if quote:
            current.append(char)
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
            current.append(char)
        elif char == ";":
            statements.append("".join(current))
            current = []
        else:
            current.append(char)
    statements.append("".join(current))
    stripped = (s.strip() for s in statements)
    return [s for s in stripped if s and not s.startswith("--")]
