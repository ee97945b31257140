"""
Alias Resolution for Destructuring and Re-binding.

Finds every local identifier that stands for a member of the global:

- ``const E = Ember`` makes ``E`` a root alias, usable wherever the global is;
- ``const { computed, String: { underscore } } = Ember`` binds identifiers to
  member paths, recursing through nested object patterns;
- ``const { oneWay } = computed`` chains from a previously recorded alias;
- ``const S = Ember.String`` binds an identifier to a path with no mapping.

An identifier whose path is in the mapping table becomes a *concrete* alias
and its slot in the pattern is removed. Any other identifier becomes a
*pending* alias: it stays in place until the end of the run, when it is
either pruned (nothing references it any more) or reported.

Patterns are tracked as slot trees so the Replacer can delete exactly the
resolved properties, whole nested patterns, or the whole declarator.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from tree_sitter import Node

from ember_migrator.analysis.scope import Declaration
from ember_migrator.core.import_fixer import ModuleBinding
from ember_migrator.core.rewriter.context import RewriteContext
from ember_migrator.core.rewriter.expander import expand, first_match
from ember_migrator.core.syntax import is_member_object, member_chain, string_value, text, walk
from ember_migrator.enums import NamespacePolicy, WarningKind

logger = logging.getLogger(__name__)

ROOT = "root"
CONCRETE = "concrete"
PENDING = "pending"


@dataclass(eq=False)
class PatternSlot:
  """One property of an object pattern."""

  node: Node
  removed: bool = False
  child: Optional["PatternRecord"] = None

  @property
  def pruned(self) -> bool:
    return self.removed or (self.child is not None and self.child.is_empty)


@dataclass(eq=False)
class PatternRecord:
  """An object pattern and its slots, in source order."""

  node: Node
  slots: List[PatternSlot] = field(default_factory=list)

  @property
  def is_empty(self) -> bool:
    return all(slot.pruned for slot in self.slots)


@dataclass(eq=False)
class Destructuring:
  """A declarator whose target is an object pattern bound to the global."""

  declarator: Node
  pattern: PatternRecord


@dataclass(eq=False)
class AliasRecord:
  """
  A local identifier standing for a member path of the global.

  Attributes:
      name: Local identifier.
      declaration: Its scope declaration.
      path: Member path (empty for root aliases).
      kind: ``root``, ``concrete`` or ``pending``.
      parent: Alias this one was destructured or re-bound from.
      slot: Pattern slot owning the identifier, None when the alias owns its
          whole declarator.
      declarator: The declarator introducing the alias.
      missing: True until this alias or one chained beneath it resolves.
      binding: Module binding of a concrete alias, once bound.
  """

  name: str
  declaration: Declaration
  path: str
  kind: str
  parent: Optional["AliasRecord"] = None
  slot: Optional[PatternSlot] = None
  declarator: Optional[Node] = None
  missing: bool = True
  binding: Optional[ModuleBinding] = None

  @property
  def destructured(self) -> bool:
    return self.slot is not None

  def resolve_descendant(self) -> None:
    """Clears ``missing`` on this alias and every alias above it."""
    current: Optional[AliasRecord] = self
    while current is not None:
      current.missing = False
      current = current.parent


class AliasResolver:
  """
  Collects and finalizes the aliases of one file.
  """

  def __init__(self, ctx: RewriteContext) -> None:
    self.ctx = ctx
    self.records: List[AliasRecord] = []
    self.pending: Dict[str, List[AliasRecord]] = {}
    self.destructurings: List[Destructuring] = []
    self._by_decl: Dict[int, AliasRecord] = {}
    self._chain_sources: Set[int] = set()

  # --- Queries ---

  def alias_for(self, node: Node) -> Optional[AliasRecord]:
    """Returns the alias a reference resolves to, if any."""
    decl = self.ctx.scope.lookup(node)
    if decl is None:
      return None
    return self._by_decl.get(decl.node.id)

  def pending_alias(self, node: Node) -> Optional[AliasRecord]:
    """Looks a reference up in the pending table."""
    for record in self.pending.get(text(node), []):
      if self.ctx.scope.resolves(node, record.declaration):
        return record
    return None

  def is_namespace(self, path: str) -> bool:
    return path in self.ctx.config.namespaces

  def concrete(self) -> List[AliasRecord]:
    return [r for r in self.records if r.kind == CONCRETE]

  # --- Collection ---

  def collect(self) -> None:
    """Visits every variable declarator in document order."""
    for node in walk(self.ctx.root):
      if node.type == "variable_declarator":
        self._visit_declarator(node)
    logger.debug(
      "Aliases: %d concrete, %d pending, %d destructurings",
      len(self.concrete()),
      sum(len(v) for v in self.pending.values()),
      len(self.destructurings),
    )

  def _visit_declarator(self, declarator: Node) -> None:
    target = declarator.child_by_field_name("name")
    value = declarator.child_by_field_name("value")
    if target is None or value is None:
      return
    if target.type == "identifier":
      self._visit_identifier(declarator, target, value)
    elif target.type == "object_pattern":
      self._visit_pattern(declarator, target, value)
    elif target.type == "array_pattern":
      base = self._base_of(value)
      if base is not None:
        self.ctx.warn(WarningKind.UNSUPPORTED_DESTRUCTURING, base[0], target)

  def _base_of(self, value: Node) -> Optional[Tuple[str, Optional[AliasRecord], bool]]:
    """
    Resolves a destructuring source to ``(path, parent_alias, chained)``.
    """
    if value.type == "identifier":
      if self.ctx.is_root_ref(value):
        return "", None, False
      parent = self.alias_for(value)
      if parent is not None:
        return parent.path, parent, True
      return None
    if value.type == "member_expression":
      chain = member_chain(value)
      if chain is not None and self.ctx.is_root_ref(chain[0]):
        return ".".join(chain[1]), None, False
    return None

  def _visit_identifier(self, declarator: Node, target: Node, value: Node) -> None:
    declaration = self.ctx.scope.declaration_of(target)
    if declaration is None:
      return
    name = text(target)

    if value.type == "identifier":
      if self.ctx.is_root_ref(value):
        self._register(AliasRecord(name, declaration, "", ROOT, declarator=declarator, missing=False))
        self.ctx.root_alias_decls.add(declaration.node.id)
        self._chain_sources.add(value.id)
        return
      parent = self.alias_for(value)
      if parent is None:
        return
      self._chain_sources.add(value.id)
      if parent.kind == ROOT:
        self._register(AliasRecord(name, declaration, "", ROOT, parent=parent, declarator=declarator, missing=False))
        self.ctx.root_alias_decls.add(declaration.node.id)
        return
      self._bind(name, declaration, parent.path, parent, None, declarator)
      return

    if value.type == "member_expression":
      chain = member_chain(value)
      if chain is None or not self.ctx.is_root_ref(chain[0]):
        return
      # Mapped chains are manual re-aliasing, left to the direct usage pass.
      if first_match(expand(chain[0]), self.ctx.mapping) is not None:
        return
      path = ".".join(chain[1])
      self.ctx.destructure_sources.add(value.id)
      self._register(AliasRecord(name, declaration, path, PENDING, declarator=declarator))

  def _visit_pattern(self, declarator: Node, pattern: Node, value: Node) -> None:
    base = self._base_of(value)
    if base is None:
      return
    path, parent, chained = base
    if value.type == "member_expression":
      self.ctx.destructure_sources.add(value.id)
    else:
      self._chain_sources.add(value.id)
    record = self._walk_pattern(declarator, pattern, path, parent, chained)
    self.destructurings.append(Destructuring(declarator, record))
    self.ctx.declarator_checks[declarator.id] = lambda: record.is_empty

  def _walk_pattern(
    self,
    declarator: Node,
    pattern: Node,
    path: str,
    parent: Optional[AliasRecord],
    chained: bool,
  ) -> PatternRecord:
    record = PatternRecord(pattern)
    for prop in pattern.named_children:
      if prop.type == "comment":
        continue
      slot = PatternSlot(prop)
      record.slots.append(slot)

      if prop.type == "shorthand_property_identifier_pattern":
        self._bind_slot(prop, _join(path, text(prop)), parent, slot, declarator)
        continue

      if prop.type != "pair_pattern":
        self.ctx.warn(WarningKind.UNSUPPORTED_DESTRUCTURING, path, prop)
        continue

      key = prop.child_by_field_name("key")
      target = prop.child_by_field_name("value")
      key_name = _key_name(key)
      if key_name is None or target is None:
        self.ctx.warn(WarningKind.UNSUPPORTED_DESTRUCTURING, path, prop)
        continue

      sub_path = _join(path, key_name)
      if target.type == "identifier":
        self._bind_slot(target, sub_path, parent, slot, declarator)
      elif target.type == "object_pattern" and not chained:
        slot.child = self._walk_pattern(declarator, target, sub_path, parent, chained)
      else:
        self.ctx.warn(WarningKind.UNSUPPORTED_DESTRUCTURING, sub_path, prop)
    return record

  def _bind_slot(
    self,
    ident: Node,
    path: str,
    parent: Optional[AliasRecord],
    slot: PatternSlot,
    declarator: Node,
  ) -> None:
    declaration = self.ctx.scope.declaration_of(ident)
    if declaration is None:
      return
    self._bind(text(ident), declaration, path, parent, slot, declarator)

  def _bind(
    self,
    name: str,
    declaration: Declaration,
    path: str,
    parent: Optional[AliasRecord],
    slot: Optional[PatternSlot],
    declarator: Node,
  ) -> None:
    if path in self.ctx.mapping:
      record = AliasRecord(name, declaration, path, CONCRETE, parent, slot, declarator, missing=False)
      if slot is not None:
        slot.removed = True
      else:
        self.ctx.pruned_declarators.add(declarator.id)
      if parent is not None:
        parent.resolve_descendant()
    else:
      record = AliasRecord(name, declaration, path, PENDING, parent, slot, declarator)
    self._register(record)

  def _register(self, record: AliasRecord) -> None:
    self.records.append(record)
    self._by_decl[record.declaration.node.id] = record
    if record.kind == CONCRETE:
      self.ctx.alias_decls.add(record.declaration.node.id)
    if record.kind == PENDING:
      self.pending.setdefault(record.name, []).append(record)

  # --- Binding ---

  def bind_concrete(self) -> None:
    """
    Binds every concrete alias that is not a namespace.

    The alias name is the preferred local name, so an existing rename such as
    ``get: myGet`` is reused by later usages of the same export.
    """
    for record in self.concrete():
      if not self.is_namespace(record.path):
        record.binding = self.ctx.binding_for(record.path, record.name)
        self.ctx.claimed.add(record.binding)

  def bind_namespaces(self) -> None:
    """
    Binds concrete namespace aliases that are still needed.

    Under ``keep_if_called`` an alias keeps its own import only when it is
    still referenced after namespace rewriting.
    """
    keep_all = self.ctx.config.namespace_policy == NamespacePolicy.ALWAYS_KEEP
    for record in self.concrete():
      if not self.is_namespace(record.path) or record.binding is not None:
        continue
      if keep_all or self.ctx.live_references(record.declaration):
        record.binding = self.ctx.binding_for(record.path, record.name)
        self.ctx.claimed.add(record.binding)

  # --- Finalization ---

  def finalize(self) -> None:
    """
    Prunes unused pending and root aliases and reports the rest.

    Runs in reverse creation order so pruning a chained alias frees the
    reference it was destructured from.
    """
    for record in reversed(self.records):
      if record.kind == CONCRETE:
        continue
      live = self.ctx.live_references(record.declaration)
      if not live:
        self._prune(record)
        continue
      if record.kind == ROOT:
        continue
      direct = [r for r in live if not is_member_object(r) and r.id not in self._chain_sources]
      if record.missing or direct:
        self.ctx.warn(WarningKind.MISSING_GLOBAL, record.path, record.declaration.node)

  def _prune(self, record: AliasRecord) -> None:
    if record.slot is not None:
      record.slot.removed = True
    elif record.declarator is not None:
      self.ctx.pruned_declarators.add(record.declarator.id)

  def renames(self) -> List[Tuple[Node, str, str]]:
    """
    Lists ``(reference, alias_name, local_name)`` for live references of
    concrete aliases whose binding uses a different local name.
    """
    out: List[Tuple[Node, str, str]] = []
    for record in self.concrete():
      binding = record.binding
      if binding is None or binding.local_name == record.name:
        continue
      for ref in self.ctx.live_references(record.declaration):
        out.append((ref, record.name, binding.local_name))
    return out


def _join(path: str, name: str) -> str:
  return f"{path}.{name}" if path else name


def _key_name(key: Optional[Node]) -> Optional[str]:
  if key is None:
    return None
  if key.type == "property_identifier":
    return text(key)
  if key.type == "string":
    return string_value(key)
  return None
