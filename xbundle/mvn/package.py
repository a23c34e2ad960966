"""Maven coordinates: packages, versions and artifacts."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass

_NUMBER = re.compile(r"\+?[0-9]+")
_U32_MAX = 0xFFFFFFFF


@dataclass(frozen=True)
class Package:
    """A Maven package identified by group and artifact name."""

    group: str
    name: str

    def file_name(self) -> str:
        """Cache file name of the package metadata."""
        return f"{self.group}-{self.name}.metadata.xml"

    def url(self, repo: str) -> str:
        """URL of the package metadata in ``repo``."""
        return f"{repo}/{self.group.replace('.', '/')}/{self.name}/maven-metadata.xml"

    def __str__(self) -> str:
        return f"{self.group}:{self.name}"


def _parse_component(text: str) -> int:
    if not _NUMBER.fullmatch(text):
        raise ValueError(f"invalid version component: {text!r}")
    value = int(text)
    if value > _U32_MAX:
        raise ValueError(f"version component out of range: {text!r}")
    return value


@functools.total_ordering
@dataclass(frozen=True)
class Version:
    """A major.minor.patch version with an optional suffix; suffixed versions sort first."""

    major: int = 0
    minor: int = 0
    patch: int = 0
    suffix: str | None = None

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse ``major[.minor[.patch]][-suffix]``; missing parts default to zero."""
        base, sep, suffix = text.partition("-")
        parts = base.split(".")[:3]
        numbers = [_parse_component(part) for part in parts]
        numbers += [0] * (3 - len(numbers))
        return cls(*numbers, suffix=suffix if sep else None)

    @classmethod
    def lowest(cls) -> Version:
        return cls(0, 0, 0, None)

    def bump(self) -> Version:
        """The smallest version above this one without a suffix."""
        patch = self.patch if self.suffix is not None else self.patch + 1
        return Version(self.major, self.minor, patch, None)

    def _key(self) -> tuple:
        return (
            self.major,
            self.minor,
            self.patch,
            self.suffix is None,
            self.suffix or "",
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        return text if self.suffix is None else f"{text}-{self.suffix}"


@dataclass(frozen=True)
class Artifact:
    """A specific version of a package."""

    package: Package
    version: Version

    def file_name(self, ext: str) -> str:
        """Cache file name of the artifact with extension ``ext``."""
        return f"{self.package.group}-{self.package.name}-{self.version}.{ext}"

    def url(self, repo: str, ext: str) -> str:
        """URL of the artifact file with extension ``ext`` in ``repo``."""
        group = self.package.group.replace(".", "/")
        name = self.package.name
        return f"{repo}/{group}/{name}/{self.version}/{name}-{self.version}.{ext}"

    def __str__(self) -> str:
        return f"{self.package.group}:{self.package.name}:{self.version}"