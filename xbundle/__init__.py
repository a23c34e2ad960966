"""PRI resource files and Maven version ranges, POMs and dependency resolution."""

__version__ = "0.1.0"