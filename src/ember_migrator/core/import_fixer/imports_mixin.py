"""
Import Logic Mixin.

Reads the existing ``import`` statements of a program, records the removal of
the tracked global's import, and re-renders statements whose specifier list
changed.
"""

from typing import List, Optional

from ember_migrator.core.import_fixer.models import ImportDeclaration


class ImportsMixin:
  """
  Mixin for processing existing import statements.

  Assumed attributes on self:
      root, patcher, config, declarations (see ``BaseImportSynthesizer``).
  """

  def scan(self) -> List[ImportDeclaration]:
    """
    Collects the top-level import statements.

    Returns:
        List[ImportDeclaration]: Editable models in source order.
    """
    self.declarations = []
    for node in self.root.named_children:
      if node.type != "import_statement":
        continue
      decl = ImportDeclaration.from_node(node)
      if decl is not None:
        self.declarations.append(decl)
    return self.declarations

  def default_import(self, source: str) -> Optional[ImportDeclaration]:
    """Finds the statement importing the default export of ``source``."""
    for decl in self.declarations:
      if decl.source == source and decl.default is not None:
        return decl
    return None

  def remove_default(self, decl: ImportDeclaration) -> None:
    """
    Drops the default specifier; the statement goes away if nothing is left.
    """
    decl.drop_default()

  def _emit_rewrites(self) -> None:
    for decl in self.declarations:
      if decl.node is None:
        continue
      if decl.removed:
        self.patcher.delete_statement(decl.node)
      elif decl.dirty:
        self.patcher.replace(decl.node, decl.render(self.config.import_wrap_width, self.newline))
