"""File discovery driven by include/exclude glob patterns."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Pattern, Sequence

BRACE_GROUP = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` alternatives, e.g. ``*.{js,ts}`` -> ``*.js``, ``*.ts``."""

    match = BRACE_GROUP.search(pattern)
    if not match:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: List[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def glob_to_regex(pattern: str, dot: bool = True) -> Pattern[str]:
    """Translate a slash-separated glob into a regex over POSIX relative paths.

    ``**`` spans directories, ``*`` and ``?`` stay within one path segment.
    With ``dot=False`` wildcards never match a segment that starts with ``.``;
    such segments must be spelled out in the pattern (``.github/**``).
    """

    hidden_guard = "" if dot else r"(?!\.)"
    parts = ["^"]
    index, length = 0, len(pattern)
    while index < length:
        char = pattern[index]
        segment_start = index == 0 or pattern[index - 1] == "/"
        guard = hidden_guard if segment_start else ""
        if pattern.startswith("**", index):
            index += 2
            if index < length and pattern[index] == "/":
                parts.append(f"(?:{hidden_guard}[^/]*/)*")
                index += 1
            else:
                parts.append(f"(?:{guard}[^/]*(?:/{hidden_guard}[^/]*)*)?")
            continue
        if char == "*":
            parts.append(f"{guard}[^/]*")
        elif char == "?":
            parts.append(f"{guard}[^/]")
        elif char == "[":
            end = pattern.find("]", index + 1)
            if end == -1:
                parts.append(re.escape(char))
            else:
                body = pattern[index + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                parts.append("[" + body.replace("\\", "\\\\") + "]")
                index = end + 1
                continue
        else:
            parts.append(re.escape(char))
        index += 1
    parts.append("$")
    return re.compile("".join(parts))


class GlobMatcher:
    """Match relative paths against any of a set of glob patterns."""

    def __init__(self, patterns: Iterable[str], dot: bool = True) -> None:
        self.patterns = tuple(patterns)
        self._regexes = [
            glob_to_regex(expanded, dot=dot) for expanded in _expand_patterns(self.patterns)
        ]

    def __bool__(self) -> bool:
        return bool(self._regexes)

    def matches(self, relative_path: str) -> bool:
        return any(regex.match(relative_path) for regex in self._regexes)

    def matches_directory(self, relative_dir: str) -> bool:
        """True when every path below ``relative_dir`` would match."""

        probe = f"{relative_dir}/"
        return any(regex.match(probe) for regex in self._regexes)


def iter_files(root: Path, exclude: Sequence[str] = (), hidden: bool = True) -> Iterator[str]:
    """Yield POSIX paths relative to ``root`` for every non-excluded file, sorted.

    ``hidden=False`` prunes directories whose name starts with ``.``.
    """

    excluded = GlobMatcher(exclude)
    for dirpath, dirnames, filenames in os.walk(root):
        relative_dir = Path(dirpath).relative_to(root).as_posix()
        prefix = "" if relative_dir == "." else f"{relative_dir}/"
        dirnames[:] = sorted(
            name
            for name in dirnames
            if (hidden or not name.startswith("."))
            and not excluded.matches_directory(f"{prefix}{name}")
        )
        for filename in sorted(filenames):
            relative = f"{prefix}{filename}"
            if excluded and excluded.matches(relative):
                continue
            yield relative


def find_files(root: Path, include: Sequence[str], exclude: Sequence[str] = ()) -> List[str]:
    """Resolve include/exclude globs to a deduplicated list of relative paths.

    Files are grouped by the first include pattern they match, in pattern
    order, then sorted; exclude patterns always win.  Like shell globs,
    wildcards skip dot-files and dot-directories unless the include pattern
    names them explicitly.
    """

    candidates = list(iter_files(root, exclude, hidden=mentions_hidden(include)))
    seen = set()
    resolved: List[str] = []
    for pattern in include:
        matcher = GlobMatcher([pattern], dot=False)
        for relative in candidates:
            if relative in seen or not matcher.matches(relative):
                continue
            seen.add(relative)
            resolved.append(relative)
    return resolved


def mentions_hidden(patterns: Iterable[str]) -> bool:
    """True when any pattern spells out a segment starting with ``.``."""

    for expanded in _expand_patterns(patterns):
        for segment in expanded.split("/"):
            if segment.startswith(".") and segment not in (".", ".."):
                return True
    return False


def _expand_patterns(patterns: Iterable[str]) -> Iterator[str]:
    for pattern in patterns:
        for expanded in expand_braces(pattern):
            yield expanded[2:] if expanded.startswith("./") else expanded
