import pytest

from xbundle.mvn.package import Version
from xbundle.mvn.range import parse_range
from xbundle.mvn.resolver import NoSolutionError, resolve


class FakeProvider:
    """Chooses the first pending package at its highest matching version."""

    def __init__(self, index):
        self.index = {
            (pkg, Version.parse(ver)): (
                None
                if deps is None
                else {dep: parse_range(spec) for dep, spec in deps.items()}
            )
            for (pkg, ver), deps in index.items()
        }

    def _versions(self, package):
        return sorted((v for p, v in self.index if p == package), reverse=True)

    def choose_package_version(self, candidates):
        package, version_range = next(iter(candidates))
        matching = [v for v in self._versions(package) if version_range.contains(v)]
        return package, matching[0] if matching else None

    def get_dependencies(self, package, version):
        return self.index.get((package, version), {})


class OutOfRangeProvider(FakeProvider):
    def choose_package_version(self, candidates):
        package, _ = next(iter(candidates))
        return package, Version(9, 9, 9)


def test_chain_resolves_to_highest_matching_versions():
    provider = FakeProvider(
        {
            ("root", "1.0"): {"a": "[1.0,2.0)"},
            ("a", "1.0"): {},
            ("a", "1.5"): {"b": "1.0"},
            ("a", "2.0"): {},
            ("b", "1.0"): {},
            ("b", "1.2"): {},
        }
    )
    solution = resolve(provider, "root", Version.parse("1.0"))
    assert solution == {
        "root": Version.parse("1.0"),
        "a": Version.parse("1.5"),
        "b": Version.parse("1.2"),
    }


def test_shared_dependency_uses_intersection():
    provider = FakeProvider(
        {
            ("root", "1.0"): {"a": "1.0", "b": "1.0"},
            ("a", "1.0"): {"c": "[1.0,3.0)"},
            ("b", "1.0"): {"c": "[2.0,)"},
            ("c", "1.0"): {},
            ("c", "2.0"): {},
            ("c", "3.0"): {},
        }
    )
    solution = resolve(provider, "root", Version.parse("1.0"))
    assert solution["c"] == Version.parse("2.0")


def test_backtracks_past_version_with_missing_dependency():
    provider = FakeProvider(
        {
            ("root", "1.0"): {"a": "0.1"},
            ("a", "1.0"): {},
            ("a", "2.0"): {"x": "[1.0]"},
        }
    )
    solution = resolve(provider, "root", Version.parse("1.0"))
    assert solution["a"] == Version.parse("1.0")
    assert "x" not in solution


def test_backtracks_past_version_with_unknown_dependencies():
    provider = FakeProvider(
        {
            ("root", "1.0"): {"a": "1.0"},
            ("a", "1.0"): {},
            ("a", "2.0"): None,
        }
    )
    solution = resolve(provider, "root", Version.parse("1.0"))
    assert solution["a"] == Version.parse("1.0")


def test_incompatible_requirements_raise():
    provider = FakeProvider(
        {
            ("root", "1.0"): {"a": "1.0", "b": "1.0"},
            ("a", "1.0"): {"c": "(,2.0)"},
            ("b", "1.0"): {"c": "[2.0,)"},
            ("c", "1.0"): {},
            ("c", "2.0"): {},
        }
    )
    with pytest.raises(NoSolutionError):
        resolve(provider, "root", Version.parse("1.0"))


def test_unknown_root_dependencies_raise():
    provider = FakeProvider({("root", "1.0"): None})
    with pytest.raises(NoSolutionError):
        resolve(provider, "root", Version.parse("1.0"))


def test_root_without_dependencies_is_its_own_solution():
    provider = FakeProvider({("root", "1.0"): {}})
    assert resolve(provider, "root", Version.parse("1.0")) == {
        "root": Version.parse("1.0")
    }


def test_dependency_on_root_outside_its_version_fails():
    provider = FakeProvider(
        {
            ("root", "1.0"): {"a": "1.0"},
            ("a", "1.0"): {"root": "[2.0,)"},
        }
    )
    with pytest.raises(NoSolutionError):
        resolve(provider, "root", Version.parse("1.0"))


def test_provider_choosing_outside_range_is_an_error():
    provider = OutOfRangeProvider(
        {("root", "1.0"): {"a": "[1.0]"}, ("a", "1.0"): {}}
    )
    with pytest.raises(ValueError):
        resolve(provider, "root", Version.parse("1.0"))