# xbundle

Building blocks for application bundling tools:

- `xbundle.pri` reads and writes package resource index (PRI) files, section by section.
- `xbundle.mvn` handles Maven coordinates, version ranges and POM files, and
  resolves dependency graphs against a provider you supply.

The package has no dependencies outside the standard library.

## Installation

```
pip install xbundle
```

## PRI files

```python
from xbundle.pri.pri_file import PriFile

pri = PriFile.open("resources.pri")
for index in range(pri.num_sections()):
    print(pri.section(index))

pri.create("copy.pri")
```

A `PriFile` holds `Section`s; each `Section` carries its qualifier, flags and
a body in `data`. Known bodies come back as `DataItem`, `PriDescriptor`,
`ResourceMap`, `DecisionInfo` or `HierarchicalSchema`. Bodies of any other
kind come back as `UnknownSection`, which keeps the raw bytes and writes them
out unchanged. `PriFile.read` and `PriFile.write` work on any seekable binary
stream, such as `io.BytesIO`. Files are always written with the `mrm_pri2`
header. Malformed input raises `ValueError`, or `EOFError` when the data ends
early.

Sections can also be built by hand:

```python
from xbundle.pri.data_item import DataItem
from xbundle.pri.pri_file import PriFile, Section

item = DataItem()
index = item.add_string("Hello")
assert item.string(index) == "Hello"

pri = PriFile()
pri.add_section(Section(section_qualifier=0, flags=0, section_flags=0, data=item))
```

## Maven coordinates and version ranges

```python
from xbundle.mvn.package import Artifact, Package, Version

package = Package("androidx.core", "core")
version = Version.parse("1.6.0")
Artifact(package, version).url("https://repo.example.com/maven2", "aar")
```

`Version.parse` reads `major[.minor[.patch]][-suffix]`; a version with a
suffix sorts before the same version without one.

Version ranges use Maven syntax and are parsed by `parse_range`, which returns
a `VersionRange`:

```python
from xbundle.mvn.range import parse_range
from xbundle.mvn.package import Version

r = parse_range("(,1.0],[1.2,)")
r.contains(Version.parse("1.1"))   # False
Version.parse("1.2") in r          # True
```

`tokenize` and `parse_ranges` expose the lexical and structural steps.

## POM files

```python
from xbundle.mvn.pom import Dependency, Pom

pom = Pom.from_xml(open("core-1.6.0.pom").read())
pom.packaging          # "jar" when the file does not say
for dep in pom.dependencies:
    print(dep.package(), dep.range(), dep.scope)

Dependency.parse("androidx.annotation:annotation:[1.1.0,)")
```

## Dependency resolution

`xbundle.mvn.resolver.resolve` finds a version for every package reachable
from a root. It asks a provider (see `DependencyProvider`) which package and
version to try next, and what each version depends on:

```python
from xbundle.mvn.package import Package, Version
from xbundle.mvn.range import VersionRange
from xbundle.mvn.resolver import NoSolutionError, resolve


class Catalogue:
    def __init__(self, releases, deps):
        self.releases = releases   # {Package: [Version, ...]}
        self.deps = deps           # {(Package, Version): {Package: VersionRange}}

    def choose_package_version(self, candidates):
        package, allowed = candidates[0]
        fitting = [v for v in self.releases.get(package, []) if allowed.contains(v)]
        return package, max(fitting, default=None)

    def get_dependencies(self, package, version):
        return self.deps.get((package, version), {})


solution = resolve(catalogue, root_package, root_version)
# {Package: Version, ...}, the root included
```

When the constraints cannot all be met, `resolve` raises `NoSolutionError`
with a description of the conflict.

## What this package does not do

It does not download anything. There is no repository client, no reading of
`maven-metadata.xml` listings and no local artifact cache: to resolve against a
real repository you write the `DependencyProvider` yourself, fetching version
lists and POM files in whatever way suits you. There is no command-line tool.

## Running the tests

```
pip install xbundle[test]
pytest
```