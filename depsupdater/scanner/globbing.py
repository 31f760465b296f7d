"""Include/exclude glob filtering of the scan scope."""

from __future__ import annotations

import functools
import re

DEFAULT_PATTERNS = (
    "**/*",
    "!**/node_modules/**/*",
    "!**/.playwright/package/**/*",
)

_DIR_SUFFIXES = ("/**/*", "/**")


@functools.lru_cache(maxsize=256)
def _compile(pattern: str, ignore_case: bool) -> re.Pattern[str]:
    """Translate a glob to a regex: ``**/`` spans directories, ``*``/``?`` do not."""
    out: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(out), re.IGNORECASE if ignore_case else 0)


class GlobFilter:
    """Ordered glob patterns; a leading ``!`` marks an exclusion.

    Paths are POSIX-style and relative to the scan root. A file is in scope
    when it matches at least one include and no exclude.
    """

    def __init__(self, patterns: list[str] | tuple[str, ...], *, ignore_case: bool = False) -> None:
        self.ignore_case = ignore_case
        self.includes: list[str] = []
        self.excludes: list[str] = []
        for pattern in patterns:
            pattern = pattern.strip().replace("\\", "/")
            if not pattern:
                continue
            if pattern.startswith("!"):
                self.excludes.append(pattern[1:])
            else:
                self.includes.append(pattern)

    @classmethod
    def default(cls) -> GlobFilter:
        return cls(DEFAULT_PATTERNS)

    def _match(self, pattern: str, path: str) -> bool:
        return _compile(pattern, self.ignore_case).fullmatch(path) is not None

    def matches(self, rel_path: str) -> bool:
        """Whether the file at *rel_path* should be scanned."""
        path = rel_path.replace("\\", "/").strip("/")
        if not any(self._match(p, path) for p in self.includes):
            return False
        return not any(self._match(p, path) for p in self.excludes)

    def should_recurse(self, rel_dir: str) -> bool:
        """Whether the walk should descend into *rel_dir*."""
        path = rel_dir.replace("\\", "/").strip("/")
        if not path:
            return True
        for pattern in self.excludes:
            for suffix in _DIR_SUFFIXES:
                if pattern.endswith(suffix) and self._match(pattern[: -len(suffix)], path):
                    return False
        return True

    def __iter__(self):
        yield from self.includes
        yield from (f"!{p}" for p in self.excludes)
