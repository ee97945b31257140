"""
Namespace Disambiguation.

Some member paths are both a callable and a container of further members:
``computed(fn)`` is a valid usage, and so is ``computed.alias('x')``. For
every local alias of such a namespace this pass rewrites member accesses to
the leaf imports (``computed.alias`` becomes ``alias``), records direct calls,
and reports members that have no mapping.

Aliases come from three places: destructured or chained aliases, manual
``const c = Ember.computed`` declarators, and existing imports of the
namespace's own module export (``import { computed } from '@ember/object'``).
A manual alias whose every use was rewritten is removed along with the
import its initializer would have needed.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from tree_sitter import Node

from ember_migrator.analysis.scope import Declaration
from ember_migrator.core.rewriter.aliases import CONCRETE, PENDING, AliasRecord, AliasResolver
from ember_migrator.core.rewriter.context import RewriteContext
from ember_migrator.core.rewriter.expander import expand, first_match
from ember_migrator.core.syntax import is_call_target, is_member_object, member_chain, walk
from ember_migrator.enums import NamespacePolicy, WarningKind

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class NamespaceAlias:
  path: str
  declaration: Declaration
  record: Optional[AliasRecord] = None
  resolved: int = 0
  called: bool = False
  declarator: Optional[Node] = None


class NamespaceDisambiguator:
  """
  Resolves member accesses made through namespace aliases.
  """

  def __init__(self, ctx: RewriteContext, aliases: AliasResolver) -> None:
    self.ctx = ctx
    self.aliases = aliases

  def collect_aliases(self) -> List[NamespaceAlias]:
    """
    Gathers every local identifier bound to a namespace path.

    Returns:
        List[NamespaceAlias]: One entry per declaration.
    """
    found: Dict[int, NamespaceAlias] = {}

    for record in self.aliases.records:
      if record.kind in (CONCRETE, PENDING) and self.aliases.is_namespace(record.path):
        found.setdefault(record.declaration.node.id, NamespaceAlias(record.path, record.declaration, record))

    for node in walk(self.ctx.root):
      if node.type != "variable_declarator":
        continue
      target = node.child_by_field_name("name")
      value = node.child_by_field_name("value")
      if target is None or value is None or target.type != "identifier" or value.type != "member_expression":
        continue
      chain = member_chain(value)
      if chain is None or not self.ctx.is_root_ref(chain[0]):
        continue
      path = ".".join(chain[1])
      decl = self.ctx.scope.declaration_of(target)
      if decl is not None and self.aliases.is_namespace(path):
        found.setdefault(decl.node.id, NamespaceAlias(path, decl, declarator=node))

    module_scope = self.ctx.scope.scopes[0].names
    for binding in self.ctx.registry.bindings:
      if not binding.materialized:
        continue
      path = self.ctx.mapping.find_path(binding.source_module, binding.export_name)
      if path is None or not self.aliases.is_namespace(path):
        continue
      decl = module_scope.get(binding.local_name)
      if decl is not None and decl.kind == "import":
        found.setdefault(decl.node.id, NamespaceAlias(path, decl))

    return list(found.values())

  def run(self) -> List[NamespaceAlias]:
    """
    Rewrites namespace member accesses and reports unknown members.

    Returns:
        List[NamespaceAlias]: The aliases with their usage counts.
    """
    namespaces = self.collect_aliases()
    for ns in namespaces:
      self._resolve(ns)
      if ns.declarator is not None:
        self._drop_unused_alias(ns)
      if (
        self.ctx.config.warn_ambiguous_namespaces
        and ns.record is not None
        and ns.record.destructured
        and ns.resolved
        and ns.called
      ):
        self.ctx.warn(WarningKind.AMBIGUOUS_NAMESPACE_USAGE, ns.path, ns.declaration.node)
    logger.debug("Namespace aliases: %d", len(namespaces))
    return namespaces

  def _resolve(self, ns: NamespaceAlias) -> None:
    for ref in self.ctx.scope.references_to(ns.declaration):
      if not self.ctx.is_live(ref):
        continue
      if is_call_target(ref):
        ns.called = True
        continue
      if not is_member_object(ref):
        continue
      candidates = expand(ref, ns.path)
      if not candidates:
        continue
      match = first_match(candidates, self.ctx.mapping)
      if match is None:
        self.ctx.warn(WarningKind.MISSING_NAMESPACE_MEMBER, candidates[-1][1], ref)
        continue
      location, path = match
      if self.ctx.replace(location, path, ref) is None:
        continue
      ns.resolved += 1
      if ns.record is not None:
        ns.record.resolve_descendant()

  def _drop_unused_alias(self, ns: NamespaceAlias) -> None:
    """
    Prunes ``const c = Ember.computed`` once every use of ``c`` is rewritten.

    The initializer's replacement is withdrawn with the declarator, and its
    binding is forgotten when no other usage needs it.
    """
    ctx = self.ctx
    if ctx.config.namespace_policy != NamespacePolicy.KEEP_IF_CALLED:
      return
    if not ns.resolved or ctx.live_references(ns.declaration):
      return
    value = ns.declarator.child_by_field_name("value")
    withdrawn = [r for r in ctx.replacements if r.location.id == value.id]
    if not withdrawn:
      return
    ctx.replacements = [r for r in ctx.replacements if r.location.id != value.id]
    ctx.pruned_declarators.add(ns.declarator.id)
    for replacement in withdrawn:
      ctx.release(replacement.binding)
    logger.debug("Pruned unused namespace alias %s", ns.declaration.name)
