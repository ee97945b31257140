"""
Rewriter Context Module.

This module provides the :class:`RewriteContext` container, which holds the
per-file state shared by the rewrite passes: the parsed program, its scope
model, the module registry, the warning collector, the source patcher and the
bookkeeping of which references have been rewritten or pruned. A context is
created for one transform invocation and discarded afterwards.
"""

from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Set

from tree_sitter import Node

from ember_migrator.analysis.scope import REFERENCE_TYPES, Declaration, ScopeModel
from ember_migrator.config import MigrationConfig
from ember_migrator.core.import_fixer import ImportDeclaration, ImportSynthesizer, ModuleBinding, ModuleRegistry
from ember_migrator.core.reporter import WarningCollector
from ember_migrator.core.rewriter.patcher import SourcePatcher
from ember_migrator.core.syntax import declarator_of_value, text
from ember_migrator.enums import WarningKind
from ember_migrator.semantics.mapping import MappingTable


@dataclass
class Replacement:
  """
  A matched usage waiting to be rewritten.

  Attributes:
      location: The member expression (or identifier) to replace.
      binding: The binding whose local name replaces it.
      root: The identifier at the base of the matched chain.
      path: The matched member path.
  """

  location: Node
  binding: ModuleBinding
  root: Node
  path: str = ""


class RewriteContext:
  """
  Shared state container for the rewrite passes of one file.
  """

  def __init__(
    self,
    root: Node,
    source: bytes,
    mapping: MappingTable,
    reserved: FrozenSet[str],
    config: MigrationConfig,
    file_path: str = "",
  ) -> None:
    """
    Builds the scope model, scans imports and locates the tracked global.

    Args:
        root: The ``program`` node.
        source: Original source bytes.
        mapping: Member-to-module table.
        reserved: Reserved identifiers.
        config: Engine settings.
        file_path: Path used in warnings.
    """
    self.root = root
    self.source = source
    self.mapping = mapping
    self.config = config
    self.scope = ScopeModel.build(root)
    self.patcher = SourcePatcher(source)
    self.collector = WarningCollector(source.decode("utf-8"), file_path)

    self.imports = ImportSynthesizer(root, self.patcher, config)
    self.registry = ModuleRegistry.from_declarations(self.imports.scan(), reserved, config.reserved_prefix)

    self.global_import: Optional[ImportDeclaration] = self.imports.default_import(config.global_module)
    self.global_decl: Optional[Declaration] = None
    self.global_name = config.global_name
    if self.global_import is not None:
      self.global_name = self.global_import.default
      self.global_decl = self._import_declaration(self.global_import.default)

    # -- Rewrite bookkeeping --
    self.replacements: List[Replacement] = []
    self.consumed: Set[int] = set()
    self.pruned_declarators: Set[int] = set()
    self.destructure_sources: Set[int] = set()
    self.root_alias_decls: Set[int] = set()
    self.alias_decls: Set[int] = set()
    # bindings held by alias records, never released
    self.claimed: Set[ModuleBinding] = set()
    # declarator id -> predicate telling whether its destructuring became empty
    self.declarator_checks: Dict[int, Callable[[], bool]] = {}

  def _import_declaration(self, local_name: str) -> Optional[Declaration]:
    decl = self.scope.scopes[0].names.get(local_name)
    if decl is not None and decl.kind == "import":
      return decl
    return None

  # --- Reference classification ---

  def is_global_ref(self, node: Node) -> bool:
    """True if ``node`` is a use of the tracked global itself."""
    if node.type not in REFERENCE_TYPES or text(node) != self.global_name:
      return False
    return self.scope.resolves(node, self.global_decl)

  def is_root_ref(self, node: Node) -> bool:
    """True for the global or an alias bound directly to it (``const E = Ember``)."""
    if self.is_global_ref(node):
      return True
    if node.type != "identifier":
      return False
    decl = self.scope.lookup(node)
    return decl is not None and decl.node.id in self.root_alias_decls

  def global_refs(self) -> List[Node]:
    return self.scope.references_to(self.global_decl, self.global_name)

  def is_detached(self, node: Node) -> bool:
    """True if ``node`` sits inside a declarator that will be pruned."""
    current = node.parent
    while current is not None:
      if current.type == "variable_declarator":
        if current.id in self.pruned_declarators:
          return True
        check = self.declarator_checks.get(current.id)
        if check is not None and check():
          return True
      current = current.parent
    return False

  def is_live(self, ref: Node) -> bool:
    return ref.id not in self.consumed and not self.is_detached(ref)

  def live_references(self, decl: Declaration) -> List[Node]:
    return [r for r in self.scope.references_to(decl) if self.is_live(r)]

  # --- Resolution helpers ---

  def binding_for(self, path: str, preferred_local: Optional[str] = None) -> ModuleBinding:
    """
    Reuses or creates the binding for a mapped member path.

    Args:
        path: Member path present in the mapping table.
        preferred_local: Local name to use instead of the table's suggestion.

    Returns:
        ModuleBinding: The binding.
    """
    spec = self.mapping.get(path)
    if spec is None:
      raise KeyError(path)
    local = preferred_local or self.mapping.local_name_for(path)
    return self.registry.get_or_create(spec.source_module, spec.export_name, local)

  def replace(self, location: Node, path: str, root: Node) -> Optional[Replacement]:
    """
    Records the rewrite of a matched usage and consumes its root reference.

    The usage is reported and left alone when an inner declaration captures
    the binding's local name at ``location``.

    Args:
        location: The matched member expression.
        path: Its member path.
        root: The identifier at the base of the chain.

    Returns:
        Optional[Replacement]: The replacement, or None for a captured name.
    """
    binding = self.binding_for(path)
    if prunable_declarator(location, binding.local_name) is None and self._is_captured(location, binding.local_name):
      self.warn(WarningKind.SHADOWED_LOCAL_NAME, path, root)
      self.release(binding)
      return None
    replacement = Replacement(location, binding, root, path)
    self.replacements.append(replacement)
    self.consumed.add(root.id)
    return replacement

  def _is_captured(self, location: Node, local_name: str) -> bool:
    decl = self.scope.lookup(location, local_name)
    if decl is None or decl.kind == "import" or decl.scope_index == 0:
      return False
    return decl.node.id not in self.alias_decls

  def warn(self, kind: WarningKind, subject: str, node: Node) -> None:
    self.collector.add(kind, subject, node)

  def release(self, binding: ModuleBinding) -> None:
    """Forgets a pending binding once no replacement or alias holds it."""
    if binding.materialized or binding in self.claimed:
      return
    if self.registry.find_existing(binding.source_module, binding.export_name) is not binding:
      return
    if any(r.binding is binding for r in self.replacements):
      return
    self.registry.discard(binding)


def prunable_declarator(location: Node, local_name: str) -> Optional[Node]:
  """
  Returns the declarator ``location`` initializes when it declares
  ``local_name`` itself (``const Component = Ember.Component``).
  """
  declarator = declarator_of_value(location)
  if declarator is None:
    return None
  target = declarator.child_by_field_name("name")
  if target is not None and target.type == "identifier" and text(target) == local_name:
    return declarator
  return None
