"""
PkgWatch Package Resolver.

Maps a dotted import path to a package directory and its direct imports
without importing or executing any code.
Requires Python 3.11+.
"""

import os
import sys
from importlib.machinery import EXTENSION_SUFFIXES, ModuleSpec, PathFinder

from resolver.import_scanner import ImportScanner
from resolver.models import Package
from utils.exceptions import ResolutionError
from utils.logger import LoggerMixin


class PackageResolver(LoggerMixin):
    """
    Resolves import paths to packages.

    Module specs are located one segment at a time with PathFinder, searching
    the working directory first and then sys.path. A name that designates a
    plain module resolves to the package containing it.
    """

    def __init__(self, scanner: ImportScanner | None = None) -> None:
        """
        Initialize the resolver.

        Args:
            scanner: Import scanner used to read package dependencies
        """
        self._scanner = scanner or ImportScanner()

    def resolve(
        self,
        import_path: str,
        working_directory: str,
        allow_binary: bool = True,
    ) -> Package:
        """
        Resolve an import path to a package.

        Args:
            import_path: Dotted module name
            working_directory: Directory searched before sys.path
            allow_binary: Accept packages that contain only extension modules

        Returns:
            The resolved Package

        Raises:
            ResolutionError: If the import path cannot be resolved
        """
        if not import_path or any(not part for part in import_path.split(".")):
            raise ResolutionError(import_path, "invalid import path")

        package_name, spec = self._find_package_spec(import_path, working_directory)
        locations = list(spec.submodule_search_locations or [])
        if not locations:
            raise ResolutionError(import_path, f"package {package_name!r} has no directory")

        directory = os.path.abspath(locations[0])
        is_namespace = spec.origin is None or spec.origin == "namespace"

        try:
            entries = sorted(os.listdir(directory))
        except OSError as e:
            raise ResolutionError(import_path, f"cannot list {directory}: {e}") from e

        source_files = [
            name for name in entries
            if name.endswith(".py") and os.path.isfile(os.path.join(directory, name))
        ]
        if not source_files and not is_namespace:
            has_binary = any(name.endswith(tuple(EXTENSION_SUFFIXES)) for name in entries)
            if not (allow_binary and has_binary):
                raise ResolutionError(
                    import_path, f"no Python source files in {directory}"
                )

        checked: dict[str, bool] = {}

        def is_subpackage(name: str) -> bool:
            if name not in checked:
                checked[name] = self._is_subpackage(name, working_directory)
            return checked[name]

        imports = self._scanner.imports_for_directory(
            directory, source_files, package_name, is_subpackage
        )
        package = Package(
            import_path=package_name,
            directory=directory,
            imports=imports,
            source_files=tuple(source_files),
            is_namespace=is_namespace,
        )

        self.log.debug(
            "package_resolved",
            import_path=import_path,
            package=package_name,
            directory=directory,
            imports=len(imports),
        )
        return package

    def _search_path(self, working_directory: str) -> list[str]:
        """Build the top-level search path."""
        paths = [working_directory]
        for entry in sys.path:
            entry = entry or working_directory
            if entry not in paths:
                paths.append(entry)
        return paths

    def _find_package_spec(
        self, import_path: str, working_directory: str
    ) -> tuple[str, ModuleSpec]:
        """Find the spec of the package that owns an import path."""
        parts = import_path.split(".")
        search_path = self._search_path(working_directory)
        package_spec: ModuleSpec | None = None
        package_name = ""

        for index in range(len(parts)):
            name = ".".join(parts[: index + 1])
            if package_spec is not None:
                search_path = list(package_spec.submodule_search_locations or [])

            try:
                spec = PathFinder.find_spec(name, search_path)
            except (ImportError, ValueError, OSError) as e:
                raise ResolutionError(import_path, str(e)) from e

            if spec is None:
                raise ResolutionError(import_path, f"no module named {name!r}")

            if spec.submodule_search_locations is None:
                if index != len(parts) - 1:
                    raise ResolutionError(import_path, f"{name!r} is not a package")
                break

            package_spec, package_name = spec, name

        if package_spec is None:
            raise ResolutionError(
                import_path, f"{import_path!r} is a top-level module, not a package"
            )
        return package_name, package_spec

    def _is_subpackage(self, import_path: str, working_directory: str) -> bool:
        """
        Check if a dotted name is a package nested in another package.

        Plain submodules do not count; they resolve to the parent package,
        which is a dependency already.
        """
        parent, _, _ = import_path.rpartition(".")
        try:
            parent_name, parent_spec = self._find_package_spec(parent, working_directory)
        except ResolutionError:
            return False
        if parent_name != parent:
            return False

        try:
            spec = PathFinder.find_spec(
                import_path, list(parent_spec.submodule_search_locations or [])
            )
        except (ImportError, ValueError, OSError):
            return False
        return spec is not None and spec.submodule_search_locations is not None
