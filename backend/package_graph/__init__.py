"""
PkgWatch Package Graph Package.

Transitive package discovery and the registry it populates.
Requires Python 3.11+.
"""

from package_graph.registry import PackageRegistry
from package_graph.builder import PSEUDO_IMPORT_PATHS, PackageGraphBuilder

__all__ = [
    "PackageRegistry",
    "PackageGraphBuilder",
    "PSEUDO_IMPORT_PATHS",
]
