"""
PkgWatch Resolver Package.

Resolves import paths to package directories and their direct imports.
Requires Python 3.11+.
"""

from resolver.models import ImportInfo, Package
from resolver.import_scanner import ImportScanner
from resolver.package_resolver import PackageResolver

__all__ = [
    "ImportInfo",
    "Package",
    "ImportScanner",
    "PackageResolver",
]
