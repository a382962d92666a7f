"""
PkgWatch Resolver Data Models.

Defines the resolved package descriptor and scanned import statements.
Requires Python 3.11+.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Package:
    """
    A resolved Python package.

    Identity is the import path. Instances are immutable once resolved and
    shared between both registry indices.
    """

    import_path: str
    directory: str
    imports: tuple[str, ...] = ()
    source_files: tuple[str, ...] = ()
    is_namespace: bool = False


@dataclass(slots=True)
class ImportInfo:
    """Import statement information."""

    module_name: str = ""
    imported_names: list[str] = field(default_factory=list)
    relative_level: int = 0
    line: int = 0

    @property
    def is_relative(self) -> bool:
        """Check if this is a relative ('from . import x') import."""
        return self.relative_level > 0

    def absolute_module(self, package: str) -> str | None:
        """
        Get the absolute module name this import refers to.

        Args:
            package: Import path of the package containing the importing file

        Returns:
            Absolute dotted module name, or None if a relative import climbs
            above the top-level package
        """
        if not self.is_relative:
            return self.module_name or None

        parts = package.split(".") if package else []
        # One dot means the current package
        if self.relative_level > len(parts):
            return None

        base = ".".join(parts[: len(parts) - self.relative_level + 1])
        if self.module_name:
            return f"{base}.{self.module_name}"
        return base
