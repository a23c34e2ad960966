[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xbundle"
version = "0.1.0"
description = "PRI resource file reader/writer and Maven version ranges, POM parsing and dependency resolution"
requires-python = ">=3.10"
dependencies = []
keywords = ["pri", "resources", "maven", "pom", "version-range", "dependency-resolution"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["xbundle"]

[tool.pytest.ini_options]
addopts = "-ra"
