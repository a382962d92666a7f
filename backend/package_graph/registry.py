"""
PkgWatch Package Registry.

Import-path and directory indices over resolved packages.
Requires Python 3.11+.
"""

import os
from collections.abc import Mapping
from types import MappingProxyType

from resolver.models import Package


class PackageRegistry:
    """
    Registry of resolved packages, indexed by import path and by directory.

    A package is present in both indices or in neither. The registry has a
    single writer (the discovery thread). The directory index is replaced by a
    new read-only mapping on every insertion, so the event proxy can look up
    owners from another thread against a consistent snapshot.
    """

    def __init__(self) -> None:
        self._by_import_path: dict[str, Package] = {}
        self._by_directory: Mapping[str, Package] = MappingProxyType({})
        # Requested import paths that resolved to a package registered
        # under another name, e.g. "a.b.mod" -> "a.b"
        self._aliases: dict[str, str] = {}

    def __contains__(self, import_path: object) -> bool:
        return import_path in self._by_import_path or import_path in self._aliases

    def __len__(self) -> int:
        return len(self._by_import_path)

    def get(self, import_path: str) -> Package | None:
        """Look up a package by import path or alias."""
        canonical = self._aliases.get(import_path, import_path)
        return self._by_import_path.get(canonical)

    def get_by_directory(self, directory: str) -> Package | None:
        """Look up the package rooted at a directory."""
        return self._by_directory.get(directory)

    @property
    def packages(self) -> list[Package]:
        """All registered packages."""
        return list(self._by_import_path.values())

    def add(self, package: Package, requested: str | None = None) -> bool:
        """
        Insert a package into both indices.

        Args:
            package: Resolved package
            requested: Import path that was asked for, if it differs

        Returns:
            True if the package was inserted, False if its import path or
            directory was already registered (only the alias is recorded)
        """
        existing = self._by_import_path.get(package.import_path)
        if existing is None:
            existing = self._by_directory.get(package.directory)

        if existing is not None:
            for name in (requested, package.import_path):
                if name and name != existing.import_path:
                    self._aliases[name] = existing.import_path
            return False

        self._by_import_path[package.import_path] = package
        by_directory = dict(self._by_directory)
        by_directory[package.directory] = package
        self._by_directory = MappingProxyType(by_directory)

        if requested and requested != package.import_path:
            self._aliases[requested] = package.import_path
        return True

    def snapshot(self) -> dict[str, Package]:
        """Copy of the import-path index."""
        return dict(self._by_import_path)

    def owner_of(self, path: str, boundary: str | None = None) -> Package | None:
        """
        Find the package owning a filesystem path.

        Walks the parent, grandparent, ... of path and returns the first
        package rooted at one of them, so the deepest match wins.

        Args:
            path: Absolute path of a changed file
            boundary: Directory at which the walk stops when path lies under it

        Returns:
            The owning package, or None
        """
        index = self._by_directory
        current = os.path.abspath(path)

        within = False
        if boundary:
            boundary = os.path.abspath(boundary)
            within = current.startswith(boundary.rstrip(os.sep) + os.sep)

        while True:
            parent = os.path.dirname(current)
            if parent == current:
                return None
            current = parent

            package = index.get(current)
            if package is not None:
                return package
            if within and current == boundary:
                return None
