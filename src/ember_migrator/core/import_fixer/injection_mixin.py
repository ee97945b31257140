"""
Import Injection Mixin.

Attaches unmaterialized bindings to import statements: a specifier joins an
existing statement of the same module when there is one, otherwise a new
statement is synthesized. New statements are inserted before the first
top-level statement, which keeps the file's leading comment block on top.
"""

from typing import List, Optional

from tree_sitter import Node

from ember_migrator.core.import_fixer.models import ImportDeclaration
from ember_migrator.core.import_fixer.registry import ModuleRegistry


class InjectionMixin:
  """
  Mixin for materializing bindings.

  Assumed attributes on self:
      root, patcher, config, newline, declarations, _created.
  """

  def materialize(self, registry: ModuleRegistry) -> None:
    """
    Gives every pending binding an import statement and records the edits.

    Args:
        registry: The file's module registry.
    """
    for binding in registry.pending():
      decl = self.find_declaration(binding.source_module)
      if decl is None:
        decl = ImportDeclaration(source=binding.source_module, quote=self.config.quote.char)
        self._created.append(decl)
      decl.add(binding.export_name, binding.local_name)
      binding.attach(decl)

    self._emit_rewrites()
    self._inject_new()

  def _inject_new(self) -> None:
    if not self._created:
      return
    width = self.config.import_wrap_width
    lines: List[str] = [decl.render(width, self.newline) for decl in self._created]
    anchor = self._insertion_anchor()
    if anchor is None:
      block = self.newline.join(lines) + self.newline
      source = self.patcher.source
      offset = len(source)
      if source and not source.endswith(b"\n"):
        block = self.newline + block
      self.patcher.insert(offset, block)
      return
    source = self.patcher.source
    offset = anchor.start_byte
    line_start = source.rfind(b"\n", 0, offset) + 1
    if not source[line_start:offset].strip():
      offset = line_start
    self.patcher.insert(offset, self.newline.join(lines) + self.newline)

  def _insertion_anchor(self) -> Optional[Node]:
    """First top-level statement that is not a comment or a directive."""
    for node in self.root.named_children:
      if node.type == "comment":
        continue
      if node.type == "expression_statement" and node.named_children and node.named_children[0].type == "string":
        continue
      return node
    return None
