"""Backtracking dependency resolution over a pluggable dependency provider."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from typing import Optional, Protocol, TypeVar

from xbundle.mvn.package import Version
from xbundle.mvn.range import VersionRange

P = TypeVar("P", bound=Hashable)


class DependencyProvider(Protocol[P]):
    """Supplies candidate versions and the dependencies of each version."""

    def choose_package_version(
        self, candidates: Iterable[tuple[P, VersionRange]]
    ) -> tuple[P, Optional[Version]]:
        """Pick one of the pending packages and a version inside its range.

        Returning None as the version means no version of that package fits.
        """
        ...

    def get_dependencies(
        self, package: P, version: Version
    ) -> Optional[Mapping[P, VersionRange]]:
        """Dependencies of a package version, or None when they are unknown."""
        ...


class NoSolutionError(Exception):
    """No set of versions satisfies all the dependency constraints."""


class _Conflict(Exception):
    pass


def _excluding(version: Version) -> VersionRange:
    return VersionRange.strictly_lower_than(version).union(
        VersionRange.higher_than(version.bump())
    )


def _apply(
    provider: DependencyProvider,
    selected: Mapping,
    constraints: Mapping,
    package,
    version: Version,
) -> dict:
    deps = provider.get_dependencies(package, version)
    if deps is None:
        raise _Conflict(f"dependencies of {package} {version} are unknown")
    chosen = {**selected, package: version}
    updated = dict(constraints)
    for dep, dep_range in deps.items():
        combined = updated.get(dep, VersionRange.any()).intersection(dep_range)
        if not combined:
            raise _Conflict(
                f"{package} {version} depends on {dep} {dep_range}, "
                f"which conflicts with {updated.get(dep)}"
            )
        if dep in chosen and not combined.contains(chosen[dep]):
            raise _Conflict(
                f"{package} {version} depends on {dep} {dep_range}, "
                f"but {dep} {chosen[dep]} is selected"
            )
        updated[dep] = combined
    return updated


def _search(provider: DependencyProvider, selected: dict, constraints: dict) -> dict:
    allowed = {p: r for p, r in constraints.items() if p not in selected}
    if not allowed:
        return selected
    last: Optional[_Conflict] = None
    while True:
        empty = next((p for p, r in allowed.items() if not r), None)
        if empty is not None:
            reason = f"no version of {empty} in {constraints[empty]} can be used"
            raise _Conflict(f"{reason}: {last}" if last else reason)
        package, version = provider.choose_package_version(list(allowed.items()))
        if package not in allowed:
            raise ValueError(f"provider chose {package}, which is not pending")
        if version is None:
            reason = f"no version of {package} matches {allowed[package]}"
            raise _Conflict(f"{reason}: {last}" if last else reason)
        if not allowed[package].contains(version):
            raise ValueError(
                f"provider chose {package} {version} outside {allowed[package]}"
            )
        try:
            updated = _apply(provider, selected, constraints, package, version)
            return _search(provider, {**selected, package: version}, updated)
        except _Conflict as exc:
            last = exc
            allowed[package] = allowed[package].intersection(_excluding(version))


def resolve(provider: DependencyProvider, package, version: Version) -> dict:
    """Find a version for every package reachable from ``package`` at ``version``.

    The result maps each package, the root included, to its selected version.
    Raises NoSolutionError when the constraints cannot all be met.
    """
    constraints = {package: VersionRange.exact(version)}
    try:
        constraints = _apply(provider, {}, constraints, package, version)
        return _search(provider, {package: version}, constraints)
    except _Conflict as exc:
        raise NoSolutionError(str(exc)) from None