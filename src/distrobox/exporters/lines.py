"""Line-oriented view of key=value files (desktop entries, systemd units).

Files are parsed into an ordered list of :class:`Line` objects. Lines that
are not ``Key=value`` pairs (comments, blanks, group headers) keep ``key``
unset and are serialized back untouched.
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class Line:
    raw: str
    key: Optional[str] = None
    group: Optional[str] = None

    @property
    def value(self) -> str:
        return self.raw.split("=", 1)[1] if self.key is not None else ""

    def with_value(self, value: str) -> "Line":
        return Line(raw=f"{self.key}={value}", key=self.key, group=self.group)


@dataclass
class LineFile:
    lines: List[Line]
    trailing_newline: bool = True

    def keys(self) -> List[str]:
        return [line.key for line in self.lines if line.key is not None]

    def values(self, key: str) -> List[str]:
        return [line.value for line in self.lines if line.key == key]

    def has_key(self, key: str) -> bool:
        return any(line.key == key for line in self.lines)

    def serialize(self) -> str:
        text = "\n".join(line.raw for line in self.lines)
        if self.trailing_newline and self.lines:
            text += "\n"
        return text


def parse_line(raw: str, group: Optional[str]) -> Line:
    stripped = raw.strip()
    if not stripped or stripped.startswith(("#", ";", "[")) or "=" not in stripped:
        return Line(raw=raw, group=group)
    key = raw.split("=", 1)[0].strip()
    return Line(raw=raw, key=key, group=group)


def parse(text: str) -> LineFile:
    lines = []
    group = None
    for raw in text.splitlines():
        stripped = raw.strip()
        if stripped.startswith("[") and stripped.endswith("]"):
            group = stripped[1:-1]
        lines.append(parse_line(raw, group))
    return LineFile(lines=lines, trailing_newline=text.endswith("\n"))
