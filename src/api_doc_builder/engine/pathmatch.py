"""Ant-style path patterns.

``?`` matches one character, ``*`` any run inside a segment, ``**`` any
number of segments, ``{var}`` / ``{var:regex}`` one segment (or the regex).
"""

import re
from functools import lru_cache

_GLOB = re.compile(r"\?|\*|\{((?:\{[^/]+?\}|[^/{}]|\\[{}])+?)\}")

PATH_SEPARATOR = "/"


def match(pattern: str, path: str) -> bool:
    """Return True if ``path`` matches the Ant-style ``pattern``."""
    if path.startswith(PATH_SEPARATOR) != pattern.startswith(PATH_SEPARATOR):
        return False
    return _match_segments(tuple(_split(pattern)), tuple(_split(path)))


def parse_path(pattern: str) -> str:
    """Strip regex constraints from path variables: ``{id:\\d+}`` -> ``{id}``."""
    result = []
    pos = 0
    for m in _GLOB.finditer(pattern):
        if m.group(1) is None:
            continue
        name = m.group(1).split(":", 1)[0].strip()
        result.append(pattern[pos:m.start()])
        result.append("{" + name + "}")
        pos = m.end()
    result.append(pattern[pos:])
    return "".join(result)


def _split(value: str) -> list[str]:
    return [s for s in value.split(PATH_SEPARATOR) if s]


def _match_segments(patterns: tuple[str, ...], segments: tuple[str, ...]) -> bool:
    if not patterns:
        return not segments
    head = patterns[0]
    if head == "**" or head.startswith("{*"):
        return any(_match_segments(patterns[1:], segments[i:]) for i in range(len(segments) + 1))
    if not segments:
        return False
    return _segment_regex(head).fullmatch(segments[0]) is not None and _match_segments(patterns[1:], segments[1:])


@lru_cache(maxsize=256)
def _segment_regex(segment: str) -> re.Pattern:
    parts = []
    pos = 0
    for m in _GLOB.finditer(segment):
        parts.append(re.escape(segment[pos:m.start()]))
        token = m.group(0)
        if token == "?":
            parts.append(".")
        elif token == "*":
            parts.append(".*")
        else:
            _, _, regex = m.group(1).partition(":")
            parts.append(f"({regex})" if regex else "(.*)")
        pos = m.end()
    parts.append(re.escape(segment[pos:]))
    return re.compile("".join(parts), re.DOTALL)
