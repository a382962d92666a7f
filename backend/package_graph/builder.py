"""
PkgWatch Package Graph Builder.

Discovers a package and, transitively, everything it imports.
Requires Python 3.11+.
"""

import sys
import threading
from collections.abc import Callable
from typing import Protocol

from package_graph.registry import PackageRegistry
from resolver.models import Package
from utils.exceptions import ResolutionError
from utils.logger import LoggerMixin

# Import paths that never name a package directory
PSEUDO_IMPORT_PATHS = frozenset({"__future__", "__main__", *sys.builtin_module_names})


class Resolver(Protocol):
    """Anything that can turn an import path into a Package."""

    def resolve(
        self, import_path: str, working_directory: str, allow_binary: bool = True
    ) -> Package: ...


class Installer(Protocol):
    """Anything that can start watching a package directory."""

    def watch_directory(self, directory: str) -> None: ...


class PackageGraphBuilder(LoggerMixin):
    """
    Resolves import paths into the registry, following every import.

    Resolution is idempotent: an import path already in the registry is never
    resolved again, which also terminates import cycles. Failures are reported
    through the error callback and never raised.
    """

    def __init__(
        self,
        resolver: Resolver,
        registry: PackageRegistry,
        installer: Installer,
        report_error: Callable[[Exception], None],
        working_directory: str,
        allow_binary: bool = True,
        include_stdlib: bool = False,
        stop_event: threading.Event | None = None,
    ) -> None:
        """
        Initialize the builder.

        Args:
            resolver: Package resolver
            registry: Registry to populate
            installer: Directory watch installer
            report_error: Callback receiving non-fatal errors
            working_directory: Directory import paths are resolved from
            allow_binary: Accept packages with only compiled extensions
            include_stdlib: Resolve standard library packages too
            stop_event: Set once the owning watcher is closed
        """
        self._resolver = resolver
        self._registry = registry
        self._installer = installer
        self._report_error = report_error
        self._working_directory = working_directory
        self._allow_binary = allow_binary
        self._include_stdlib = include_stdlib
        self._stop_event = stop_event or threading.Event()

    def is_skipped(self, import_path: str) -> bool:
        """Check if an import path is never resolved."""
        if import_path in PSEUDO_IMPORT_PATHS:
            return True
        if not self._include_stdlib:
            return import_path.partition(".")[0] in sys.stdlib_module_names
        return False

    def watch_import_path(self, import_path: str) -> None:
        """
        Resolve an import path and everything it imports, then watch them.

        Args:
            import_path: Dotted module name
        """
        if self._stop_event.is_set() or self.is_skipped(import_path):
            return
        if import_path in self._registry:
            return

        try:
            package = self._resolver.resolve(
                import_path, self._working_directory, self._allow_binary
            )
        except ResolutionError as e:
            self.log.warning("resolution_failed", import_path=import_path, reason=e.reason)
            self._report_error(e)
            return
        except (ImportError, OSError, ValueError) as e:
            error = ResolutionError(import_path, str(e))
            error.__cause__ = e
            self.log.warning("resolution_failed", import_path=import_path, reason=str(e))
            self._report_error(error)
            return

        if not self._registry.add(package, requested=import_path):
            return

        self.log.info(
            "package_resolved",
            import_path=package.import_path,
            directory=package.directory,
            imports=len(package.imports),
        )

        for dependency in package.imports:
            self.watch_import_path(dependency)

        if self._stop_event.is_set():
            return

        # Every known package, not only this one; the installer skips
        # directories it has already registered
        for known in self._registry.packages:
            self._installer.watch_directory(known.directory)
