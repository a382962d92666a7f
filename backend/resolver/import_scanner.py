"""
PkgWatch Import Scanner.

Extracts import statements from Python source files using Tree-sitter.
Requires Python 3.11+.
"""

import os
from collections.abc import Callable

import tree_sitter_python as tspython
from tree_sitter import Language, Node, Parser

from resolver.models import ImportInfo
from utils.logger import LoggerMixin


class ImportScanner(LoggerMixin):
    """
    Import extractor built on Tree-sitter.

    Collects every import statement in a file, at any nesting depth, so that
    conditional and function-local imports count as dependencies too.
    """

    def __init__(self) -> None:
        """Initialize the Tree-sitter parser with Python language."""
        self._language = Language(tspython.language())
        self._parser = Parser(self._language)
        self._source: bytes = b""

    def scan_file(self, file_path: str) -> list[ImportInfo]:
        """
        Scan a Python file for imports.

        Args:
            file_path: Path to the Python file

        Returns:
            Imports in source order, empty if the file cannot be read
        """
        try:
            with open(file_path, "rb") as f:
                content = f.read()
        except OSError as e:
            self.log.error("failed_to_read_file", path=file_path, error=str(e))
            return []

        return self.scan_content(content)

    def scan_content(self, content: bytes | str) -> list[ImportInfo]:
        """
        Scan Python source for imports.

        Args:
            content: Python source code

        Returns:
            Imports in source order
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._source = content
        tree = self._parser.parse(content)

        imports: list[ImportInfo] = []
        stack: list[Node] = [tree.root_node]
        while stack:
            node = stack.pop()
            if node.type == "import_statement":
                imports.extend(self._parse_import(node))
            elif node.type == "import_from_statement":
                imports.append(self._parse_from_import(node))
            elif node.type != "future_import_statement":
                # Reversed so that pops come out in source order
                stack.extend(reversed(node.children))

        return imports

    def imports_for_directory(
        self,
        directory: str,
        source_files: list[str],
        package: str,
        is_subpackage: Callable[[str], bool] | None = None,
    ) -> tuple[str, ...]:
        """
        Collect the absolute imports of a package's source files.

        Args:
            directory: Package directory
            source_files: File names (not paths) of the package's .py files
            package: Import path of the package
            is_subpackage: Tells whether a dotted name is a subpackage. When
                given, "from x import y" also yields "x.y" if it is one

        Returns:
            De-duplicated absolute module names in first-seen order,
            excluding the package itself
        """
        seen: dict[str, None] = {}
        for file_name in source_files:
            for imp in self.scan_file(os.path.join(directory, file_name)):
                module = imp.absolute_module(package)
                if module is None:
                    self.log.debug(
                        "relative_import_out_of_range",
                        package=package,
                        file=file_name,
                        level=imp.relative_level,
                    )
                    continue
                if module != package:
                    seen.setdefault(module, None)
                if is_subpackage is None:
                    continue

                for name in imp.imported_names:
                    candidate = f"{module}.{name}"
                    if name == "*" or candidate == package or candidate in seen:
                        continue
                    if is_subpackage(candidate):
                        seen[candidate] = None
        return tuple(seen)

    def _get_text(self, node: Node) -> str:
        """Extract text content from a node."""
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def _parse_import(self, node: Node) -> list[ImportInfo]:
        """Parse an import statement (import x, y as z)."""
        infos: list[ImportInfo] = []

        for child in node.children_by_field_name("name"):
            if child.type == "aliased_import":
                child = child.child_by_field_name("name")
                if child is None:
                    continue
            infos.append(
                ImportInfo(
                    module_name=self._get_text(child),
                    line=node.start_point[0] + 1,
                )
            )

        return infos

    def _parse_from_import(self, node: Node) -> ImportInfo:
        """Parse a from-import statement (from x import y, z)."""
        info = ImportInfo(line=node.start_point[0] + 1)

        module_node = node.child_by_field_name("module_name")
        if module_node is not None and module_node.type == "relative_import":
            for sub in module_node.children:
                if sub.type == "import_prefix":
                    info.relative_level = self._get_text(sub).count(".")
                elif sub.type == "dotted_name":
                    info.module_name = self._get_text(sub)
        elif module_node is not None:
            info.module_name = self._get_text(module_node)

        for child in node.children_by_field_name("name"):
            if child.type == "aliased_import":
                child = child.child_by_field_name("name")
                if child is None:
                    continue
            info.imported_names.append(self._get_text(child))

        for child in node.children:
            if child.type == "wildcard_import":
                info.imported_names.append("*")

        return info
