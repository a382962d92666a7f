"""
Tests for Package Registry.

Requires Python 3.11+.
"""

from pathlib import Path

import pytest

from package_graph.registry import PackageRegistry
from resolver.models import Package


def make_package(import_path: str, directory: Path | str, *imports: str) -> Package:
    """Create a package rooted at directory."""
    return Package(import_path=import_path, directory=str(directory), imports=imports)


class TestPackageRegistry:
    """Test cases for PackageRegistry."""

    @pytest.fixture
    def registry(self) -> PackageRegistry:
        """Create an empty registry."""
        return PackageRegistry()

    def test_add_indexes_both_ways(self, registry: PackageRegistry, tmp_path: Path):
        """Test that a package lands in both indices."""
        package = make_package("a", tmp_path / "a")

        assert registry.add(package) is True
        assert "a" in registry
        assert registry.get("a") is package
        assert registry.get_by_directory(str(tmp_path / "a")) is package
        assert len(registry) == 1

    def test_add_existing_import_path(self, registry: PackageRegistry, tmp_path: Path):
        """Test that re-adding keeps one entry and records the alias."""
        package = make_package("a", tmp_path / "a")
        registry.add(package)

        assert registry.add(package, requested="a.module") is False
        assert len(registry) == 1
        assert "a.module" in registry
        assert registry.get("a.module") is package

    def test_add_existing_directory(self, registry: PackageRegistry, tmp_path: Path):
        """Test that one directory maps to a single package."""
        first = make_package("src.a", tmp_path / "a")
        second = make_package("a", tmp_path / "a")
        registry.add(first)

        assert registry.add(second) is False
        assert len(registry) == 1
        assert registry.get("a") is first
        assert registry.get_by_directory(str(tmp_path / "a")) is first

    def test_snapshot_is_a_copy(self, registry: PackageRegistry, tmp_path: Path):
        """Test that snapshots do not track later insertions."""
        registry.add(make_package("a", tmp_path / "a"))
        snapshot = registry.snapshot()
        registry.add(make_package("b", tmp_path / "b"))

        assert list(snapshot) == ["a"]
        assert sorted(p.import_path for p in registry.packages) == ["a", "b"]


class TestOwnerOf:
    """Test cases for owning-package lookup."""

    @pytest.fixture
    def registry(self) -> PackageRegistry:
        """Create an empty registry."""
        return PackageRegistry()

    def test_event_under_package(self, registry: PackageRegistry, tmp_path: Path):
        """Test that a file below a package directory resolves to it."""
        package = make_package("p", tmp_path / "a" / "b")
        registry.add(package)

        assert registry.owner_of(str(tmp_path / "a" / "b" / "c" / "file.py")) is package
        assert registry.owner_of(str(tmp_path / "a" / "b" / "file.py")) is package

    def test_event_outside_packages(self, registry: PackageRegistry, tmp_path: Path):
        """Test that paths with no matching ancestor have no owner."""
        registry.add(make_package("p", tmp_path / "a" / "b"))

        assert registry.owner_of(str(tmp_path / "x" / "y" / "file.py")) is None

    def test_nearest_match_wins(self, registry: PackageRegistry, tmp_path: Path):
        """Test that the deepest package directory is chosen."""
        outer = make_package("outer", tmp_path / "a")
        inner = make_package("outer.inner", tmp_path / "a" / "b")
        registry.add(outer)
        registry.add(inner)

        assert registry.owner_of(str(tmp_path / "a" / "b" / "c" / "file.py")) is inner
        assert registry.owner_of(str(tmp_path / "a" / "other.py")) is outer

    def test_working_directory_boundary(self, registry: PackageRegistry, tmp_path: Path):
        """Test that the walk stops at the working directory."""
        above = make_package("above", tmp_path / "a")
        registry.add(above)
        working_directory = str(tmp_path / "a" / "b")

        inside = str(tmp_path / "a" / "b" / "c" / "file.py")
        outside = str(tmp_path / "a" / "x" / "file.py")

        assert registry.owner_of(inside, boundary=working_directory) is None
        assert registry.owner_of(outside, boundary=working_directory) is above

    def test_empty_registry(self, registry: PackageRegistry, tmp_path: Path):
        """Test lookups against an empty registry."""
        assert registry.owner_of(str(tmp_path / "file.py")) is None
