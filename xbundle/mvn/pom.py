"""Project object model files: packaging and declared dependencies."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Optional

from xbundle.mvn.package import Package
from xbundle.mvn.range import VersionRange, parse_range


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse(text: str) -> ET.Element:
    try:
        return ET.fromstring(text.strip())
    except ET.ParseError as exc:
        raise ValueError(f"invalid XML: {exc}") from exc


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    return next((c for c in element if _local(c.tag) == name), None)


def _child_text(element: ET.Element, name: str) -> Optional[str]:
    child = _child(element, name)
    return None if child is None else (child.text or "").strip()


def _required_text(element: ET.Element, name: str) -> str:
    value = _child_text(element, name)
    if value is None:
        raise ValueError(f"missing <{name}> in <{_local(element.tag)}>")
    return value


@dataclass(frozen=True)
class Dependency:
    """A dependency on a package within a version range specification."""

    group: str
    name: str
    version: str
    scope: Optional[str] = None

    @classmethod
    def parse(cls, spec: str) -> Dependency:
        """Parse ``group:name:version``."""
        group, sep, rest = spec.partition(":")
        if not sep:
            raise ValueError("invalid dep")
        name, sep, version = rest.partition(":")
        if not sep:
            raise ValueError("invalid dep")
        return cls(group, name, version)

    @classmethod
    def _from_element(cls, element: ET.Element) -> Dependency:
        return cls(
            group=_required_text(element, "groupId"),
            name=_required_text(element, "artifactId"),
            version=_required_text(element, "version"),
            scope=_child_text(element, "scope"),
        )

    def package(self) -> Package:
        return Package(self.group, self.name)

    def range(self) -> VersionRange:
        """The versions that satisfy this dependency."""
        return parse_range(self.version)


@dataclass
class Pom:
    """The parts of a project file needed to resolve and fetch artifacts."""

    packaging: str = "jar"
    dependencies: list[Dependency] = field(default_factory=list)

    @classmethod
    def from_xml(cls, text: str) -> Pom:
        """Parse a pom.xml document."""
        root = _parse(text)
        packaging = _child_text(root, "packaging")
        deps_element = _child(root, "dependencies")
        deps = (
            []
            if deps_element is None
            else [Dependency._from_element(child) for child in deps_element]
        )
        return cls(packaging=packaging if packaging is not None else "jar", dependencies=deps)