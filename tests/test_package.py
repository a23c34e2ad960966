import pytest

from xbundle.mvn.package import Artifact, Package, Version

REPO = "https://repo.example.com/maven2"


def test_package_file_name_and_url():
    package = Package("com.example.tools", "lib")
    assert package.file_name() == "com.example.tools-lib.metadata.xml"
    assert package.url(REPO) == REPO + "/com/example/tools/lib/maven-metadata.xml"
    assert str(package) == "com.example.tools:lib"


def test_packages_are_hashable_values():
    assert Package("g", "n") == Package("g", "n")
    assert len({Package("g", "n"), Package("g", "n"), Package("g", "m")}) == 2


def test_parse_fills_missing_components():
    assert Version.parse("1.0") == Version(1, 0, 0, None)
    assert Version.parse("7") == Version(7, 0, 0, None)


def test_parse_suffix():
    version = Version.parse("1.0.0-alpha")
    assert version == Version(1, 0, 0, "alpha")
    assert str(version) == "1.0.0-alpha"


def test_parse_splits_suffix_at_first_dash():
    assert Version.parse("2.1.3-rc-1").suffix == "rc-1"


def test_parse_ignores_components_past_patch():
    assert Version.parse("1.2.3.4") == Version(1, 2, 3, None)


def test_display_round_trips():
    for text in ["0.0.1", "1.2.3", "4.5.6-beta"]:
        assert str(Version.parse(text)) == text


@pytest.mark.parametrize("text", ["", "a.b", "1.x", "1..2", "-alpha", "99999999999"])
def test_parse_rejects_invalid(text):
    with pytest.raises(ValueError):
        Version.parse(text)


def test_ordering():
    versions = [Version.parse(v) for v in ["1.0.0", "1.0.0-beta", "1.0.0-alpha", "0.9"]]
    assert [str(v) for v in sorted(versions)] == [
        "0.9.0",
        "1.0.0-alpha",
        "1.0.0-beta",
        "1.0.0",
    ]


def test_ordering_by_components():
    assert Version.parse("1.2") < Version.parse("1.10")
    assert Version.parse("2.0") > Version.parse("1.99.99")
    assert Version.parse("1.0.1") >= Version.parse("1.0.1")


def test_lowest_is_minimum():
    lowest = Version.lowest()
    assert lowest == Version.parse("0")
    assert all(lowest <= Version.parse(v) for v in ["0.0.1", "1.0", "3.2.1"])


def test_bump_without_suffix_increments_patch():
    assert Version.parse("1.2.3").bump() == Version(1, 2, 4, None)


def test_bump_with_suffix_drops_suffix():
    version = Version.parse("1.2.3-alpha")
    bumped = version.bump()
    assert bumped == Version(1, 2, 3, None)
    assert version < bumped


def test_bump_is_strictly_greater():
    for text in ["0.0.0", "1.0", "1.0-rc", "9.9.9"]:
        version = Version.parse(text)
        assert version < version.bump()


def test_artifact_names():
    artifact = Artifact(Package("com.example", "lib"), Version.parse("1.2.3"))
    assert artifact.file_name("pom") == "com.example-lib-1.2.3.pom"
    assert artifact.url(REPO, "jar") == REPO + "/com/example/lib/1.2.3/lib-1.2.3.jar"
    assert str(artifact) == "com.example:lib:1.2.3"


def test_artifact_includes_suffix():
    artifact = Artifact(Package("org.example", "core"), Version.parse("2.0-beta"))
    assert artifact.file_name("aar") == "org.example-core-2.0.0-beta.aar"