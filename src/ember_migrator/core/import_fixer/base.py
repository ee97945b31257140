"""
Base Import Synthesizer Logic.

Holds the state shared by the import mixins: the program root, the source
patcher the edits are recorded on, formatting settings and the editable
models of the import statements found in the file.
"""

from typing import List, Optional

from tree_sitter import Node

from ember_migrator.config import MigrationConfig
from ember_migrator.core.import_fixer.models import ImportDeclaration
from ember_migrator.core.rewriter.patcher import SourcePatcher
from ember_migrator.core.syntax import line_terminator


class BaseImportSynthesizer:
  """
  Base class for import manipulation.
  """

  def __init__(self, root: Node, patcher: SourcePatcher, config: Optional[MigrationConfig] = None) -> None:
    """
    Initializes the synthesizer state.

    Args:
        root: The ``program`` node.
        patcher: Edit sink for the file.
        config: Formatting settings (quote style, wrap width).
    """
    self.root = root
    self.patcher = patcher
    self.config = config or MigrationConfig()
    self.newline = line_terminator(patcher.source)
    self.declarations: List[ImportDeclaration] = []
    self._created: List[ImportDeclaration] = []

  def find_declaration(self, source: str) -> Optional[ImportDeclaration]:
    """
    Returns the import statement a new specifier for ``source`` can join.

    Statements with a namespace specifier cannot take named specifiers and
    are skipped.
    """
    for decl in self.declarations + self._created:
      if decl.source == source and decl.namespace is None and not decl.removed:
        return decl
    return None
