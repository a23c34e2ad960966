"""Maven version range specifications and the version sets they describe."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Optional, Union

from xbundle.mvn.package import Version

_OPEN = "open"
_CLOSE = "close"
_COMMA = "comma"
_VERSION = "version"

_SPECIAL = {
    "[": (_OPEN, True),
    "(": (_OPEN, False),
    "]": (_CLOSE, True),
    ")": (_CLOSE, False),
    ",": (_COMMA, None),
}


@dataclass(frozen=True)
class Token:
    """A lexical token of a range specification.

    ``kind`` is one of ``"open"``, ``"close"``, ``"comma"`` or ``"version"``.
    For brackets ``value`` tells whether the bound is inclusive; for versions
    it holds the version text.
    """

    kind: str
    value: Union[bool, str, None] = None


def tokenize(text: str) -> Iterator[Token]:
    """Split a range specification into tokens."""
    buffer: list[str] = []
    for char in text:
        special = _SPECIAL.get(char)
        if special is None:
            buffer.append(char)
            continue
        if buffer:
            yield Token(_VERSION, "".join(buffer))
            buffer.clear()
        yield Token(*special)
    if buffer:
        yield Token(_VERSION, "".join(buffer))


@dataclass(frozen=True)
class Bound:
    version: str
    inclusive: bool


@dataclass(frozen=True)
class Exact:
    version: str


@dataclass(frozen=True)
class Greater:
    bound: Bound


@dataclass(frozen=True)
class Lower:
    bound: Bound


@dataclass(frozen=True)
class Between:
    lower: Bound
    upper: Bound


RangeSpec = Union[Exact, Greater, Lower, Between]


def _parse_one(tokens: Iterator[Token]) -> Optional[RangeSpec]:
    token = next(tokens, None)
    if token is None:
        return None
    if token.kind == _VERSION:
        return Greater(Bound(token.value, True))
    if token.kind != _OPEN:
        return None
    open_inclusive = token.value

    token = next(tokens, None)
    if token is None:
        return None
    lower: Optional[Bound]
    if token.kind == _VERSION:
        after = next(tokens, None)
        if after is None:
            return None
        if after.kind == _COMMA:
            lower = Bound(token.value, open_inclusive)
        elif after.kind == _CLOSE and after.value is True and open_inclusive:
            return Exact(token.value)
        else:
            return None
    elif token.kind == _COMMA:
        lower = None
    else:
        return None

    token = next(tokens, None)
    if token is None:
        return None
    upper: Optional[Bound]
    if token.kind == _CLOSE:
        upper = None
    elif token.kind == _VERSION:
        after = next(tokens, None)
        if after is None or after.kind != _CLOSE:
            return None
        upper = Bound(token.value, after.value)
    else:
        return None

    if lower is None and upper is not None:
        return Lower(upper)
    if lower is not None and upper is None:
        return Greater(lower)
    if lower is not None and upper is not None:
        return Between(lower, upper)
    return None


def parse_ranges(tokens: Iterable[Token]) -> Iterator[RangeSpec]:
    """Group tokens into comma-separated range specifications.

    Parsing stops quietly at the first malformed range; a missing comma
    between two ranges raises ValueError.
    """
    iterator = iter(tokens)
    first = True
    while True:
        if not first:
            separator = next(iterator, None)
            if separator is None:
                return
            if separator != Token(_COMMA):
                raise ValueError(f"expected a comma between ranges, got {separator}")
        first = False
        spec = _parse_one(iterator)
        if spec is None:
            return
        yield spec


_Segment = tuple[Version, Optional[Version]]


def _normalize(segments: Iterable[_Segment]) -> tuple[_Segment, ...]:
    merged: list[_Segment] = []
    for low, high in sorted(segments, key=lambda segment: segment[0]):
        if high is not None and not low < high:
            continue
        if merged:
            prev_low, prev_high = merged[-1]
            if prev_high is None or low <= prev_high:
                if prev_high is None or high is None:
                    new_high = None
                else:
                    new_high = max(prev_high, high)
                merged[-1] = (prev_low, new_high)
                continue
        merged.append((low, high))
    return tuple(merged)


@dataclass(frozen=True)
class VersionRange:
    """A set of versions as sorted half-open segments ``[low, high)``.

    A segment with no upper end reaches every higher version.
    """

    segments: tuple[_Segment, ...] = ()

    @classmethod
    def none(cls) -> VersionRange:
        return cls(())

    @classmethod
    def any(cls) -> VersionRange:
        return cls(((Version.lowest(), None),))

    @classmethod
    def exact(cls, version: Version) -> VersionRange:
        return cls(((version, version.bump()),))

    @classmethod
    def higher_than(cls, version: Version) -> VersionRange:
        """Versions at or above ``version``."""
        return cls(((version, None),))

    @classmethod
    def strictly_lower_than(cls, version: Version) -> VersionRange:
        """Versions from the lowest one up to, but excluding, ``version``."""
        if version == Version.lowest():
            return cls.none()
        return cls(((Version.lowest(), version),))

    @classmethod
    def between(cls, low: Version, high: Version) -> VersionRange:
        """Versions at or above ``low`` and below ``high``."""
        if low < high:
            return cls(((low, high),))
        return cls.none()

    def union(self, other: VersionRange) -> VersionRange:
        return VersionRange(_normalize(self.segments + other.segments))

    def intersection(self, other: VersionRange) -> VersionRange:
        pieces = []
        for low_a, high_a in self.segments:
            for low_b, high_b in other.segments:
                low = max(low_a, low_b)
                if high_a is None:
                    high = high_b
                elif high_b is None:
                    high = high_a
                else:
                    high = min(high_a, high_b)
                pieces.append((low, high))
        return VersionRange(_normalize(pieces))

    def contains(self, version: Version) -> bool:
        return any(
            low <= version and (high is None or version < high)
            for low, high in self.segments
        )

    def __contains__(self, version: object) -> bool:
        return isinstance(version, Version) and self.contains(version)

    def lowest_version(self) -> Optional[Version]:
        """The smallest version in the range, or None when it is empty."""
        return self.segments[0][0] if self.segments else None

    def __bool__(self) -> bool:
        return bool(self.segments)

    def __str__(self) -> str:
        if not self.segments:
            return "∅"
        parts = []
        for low, high in self.segments:
            if high is None:
                parts.append(f">={low}" if low != Version.lowest() else "*")
            elif high == low.bump():
                parts.append(str(low))
            else:
                parts.append(f">={low}, <{high}")
        return " | ".join(parts)


def parse_range(text: str) -> VersionRange:
    """Turn a Maven version range specification into a VersionRange."""
    result = VersionRange.none()
    for spec in parse_ranges(tokenize(text)):
        if isinstance(spec, Exact):
            piece = VersionRange.exact(Version.parse(spec.version))
        elif isinstance(spec, Lower):
            upper = Version.parse(spec.bound.version)
            if spec.bound.inclusive:
                upper = upper.bump()
            piece = VersionRange.strictly_lower_than(upper)
        elif isinstance(spec, Greater):
            piece = VersionRange.higher_than(Version.parse(spec.bound.version))
        else:
            lower = Version.parse(spec.lower.version)
            upper = Version.parse(spec.upper.version)
            if spec.upper.inclusive:
                upper = upper.bump()
            piece = VersionRange.between(lower, upper)
        result = result.union(piece)
    return result