"""Line-oriented ``key = value`` config files (.npmrc).

A file is parsed into an ordered list of lines:
- ``ConfigLine``: an active ``key = value`` entry, or a commented-out one
  (``# key = value``) that is inert but keeps its key and value
- ``VerbatimLine``: anything else (blank lines, prose comments), written
  back exactly as read

Merges are pure functions over that list. ``update_config`` reads a file,
applies a merge and atomically replaces the file with the result.
"""

import logging
import os
import re
import tempfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from nscm.exceptions import ConfigFileError

logger = logging.getLogger(__name__)

DEFAULT_COMMENT_CHAR = "#"
DEFAULT_NEW_FILE_MODE = 0o600
ENCODING = "utf-8"

# Keys have no whitespace or '='; the value is everything after the first '='.
_ENTRY_RE = re.compile(r"^\s*(?P<key>[^\s=]+)\s*=\s*(?P<value>.*?)\s*$")


@dataclass(frozen=True)
class ConfigLine:
    key: str
    value: str
    comment: bool = False


@dataclass(frozen=True)
class VerbatimLine:
    text: str


Line = ConfigLine | VerbatimLine
ParsedConfig = list[Line]
Transform = Callable[[ParsedConfig], ParsedConfig]


# --- Parsing ---


def parse_line(text: str, comment_char: str = DEFAULT_COMMENT_CHAR) -> Line:
    stripped = text.lstrip()
    comment = stripped.startswith(comment_char)
    body = stripped[len(comment_char) :] if comment else stripped

    match = _ENTRY_RE.match(body)
    if match is None:
        return VerbatimLine(text)
    return ConfigLine(key=match["key"], value=match["value"], comment=comment)


def detect_newline(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def split_lines(text: str) -> list[str]:
    """Split on line feeds only, dropping the ``\\r`` of CRLF endings."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_config(text: str, comment_char: str = DEFAULT_COMMENT_CHAR) -> ParsedConfig:
    return [parse_line(line, comment_char) for line in split_lines(text)]


def format_line(line: Line, comment_char: str = DEFAULT_COMMENT_CHAR) -> str:
    if isinstance(line, VerbatimLine):
        return line.text
    entry = f"{line.key} = {line.value}"
    return f"{comment_char} {entry}" if line.comment else entry


def serialize_config(
    lines: Sequence[Line],
    comment_char: str = DEFAULT_COMMENT_CHAR,
    newline: str = "\n",
) -> str:
    if not lines:
        return ""
    return newline.join(format_line(line, comment_char) for line in lines) + newline


# --- Merge policies ---


def _has_key(line: Line, key: str) -> bool:
    return isinstance(line, ConfigLine) and line.key == key


def replace_key(lines: Sequence[Line], key: str, value: str) -> ParsedConfig:
    """Drop every line for ``key`` and append ``key = value`` at the end."""
    kept = [line for line in lines if not _has_key(line, key)]
    return kept + [ConfigLine(key=key, value=value)]


def comment_and_replace(lines: Sequence[Line], key: str, value: str) -> ParsedConfig:
    """Point ``key`` at ``value``, commenting out its other values.

    Lines already holding ``value`` are dropped, every other line for ``key``
    is kept as a comment, and ``key = value`` is appended at the end.
    """
    merged: ParsedConfig = []
    for line in lines:
        if isinstance(line, ConfigLine) and line.key == key:
            if line.value != value:
                merged.append(replace(line, comment=True))
        else:
            merged.append(line)
    merged.append(ConfigLine(key=key, value=value))
    return merged


# --- File update ---


def read_text(path: Path) -> str:
    """Read ``path`` as UTF-8 with line endings untouched. A missing file is empty."""
    try:
        with open(path, encoding=ENCODING, newline="") as f:
            return f.read()
    except FileNotFoundError:
        return ""
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(path, f"read failed: {e}") from e


def read_config(path: Path, comment_char: str = DEFAULT_COMMENT_CHAR) -> ParsedConfig:
    """Read and parse ``path``. A missing file is an empty config."""
    return parse_config(read_text(path), comment_char)


def _write_atomic(path: Path, content: str, mode: int) -> None:
    if path.exists():
        mode = path.stat().st_mode & 0o777

    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding=ENCODING, newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def update_config(
    path: Path,
    comment_char: str,
    transform: Transform,
    mode: int = DEFAULT_NEW_FILE_MODE,
) -> ParsedConfig:
    """Apply ``transform`` to the config at ``path`` and write the result back.

    The new content is written to a temporary file next to ``path`` and moved
    over it, so ``path`` holds either the old or the new content. A symlinked
    ``path`` is followed and the file it points to is updated.

    Args:
        path: Config file to update. Created if missing.
        comment_char: Comment marker used by the file format.
        transform: Merge applied to the parsed lines.
        mode: Permissions for a newly created file, private (0600) unless
            given. Existing files keep theirs.

    Returns:
        The lines written.

    Raises:
        ConfigFileError: If the file could not be read or written.
    """
    path = Path(path).resolve()
    text = read_text(path)
    lines = transform(parse_config(text, comment_char))
    content = serialize_config(lines, comment_char, detect_newline(text))

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _write_atomic(path, content, mode)
    except OSError as e:
        raise ConfigFileError(path, f"write failed: {e}") from e

    logger.debug("Wrote %d line(s) to %s", len(lines), path)
    return lines
