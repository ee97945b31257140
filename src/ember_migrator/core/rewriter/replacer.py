"""
Usage Replacement.

Finds direct member accesses of the global (``Ember.computed.or``, or the same
through a root alias), resolves them against the mapping table, and turns
every accepted decision into patch actions: replaced references, renamed
alias references, and pruned declarators and pattern properties.
"""

import logging
from typing import Dict, List, Sequence, Tuple

from tree_sitter import Node

from ember_migrator.core.errors import TransformError
from ember_migrator.core.rewriter.aliases import Destructuring, PatternRecord
from ember_migrator.core.rewriter.context import RewriteContext, prunable_declarator
from ember_migrator.core.rewriter.expander import expand, first_match
from ember_migrator.core.syntax import declarators
from ember_migrator.enums import WarningKind

logger = logging.getLogger(__name__)

STATEMENT_PARENTS = frozenset({"program", "statement_block", "switch_case", "switch_default", "export_statement"})


class Replacer:
  """
  Collects direct usages and applies every rewrite decision to the patcher.
  """

  def __init__(self, ctx: RewriteContext) -> None:
    self.ctx = ctx

  def collect_direct(self) -> None:
    """
    Resolves member accesses rooted at the global or a root alias.

    Unmatched accesses are reported as ``missing-global`` with their least
    specific path. Chains used as destructuring sources are left to the
    alias resolver.
    """
    ctx = self.ctx
    for ref in ctx.scope.references:
      if ref.type != "identifier" or not ctx.is_live(ref) or not ctx.is_root_ref(ref):
        continue
      candidates = expand(ref)
      if not candidates:
        continue
      if any(location.id in ctx.destructure_sources for location, _ in candidates):
        continue
      match = first_match(candidates, ctx.mapping)
      if match is None:
        ctx.warn(WarningKind.MISSING_GLOBAL, candidates[-1][1], ref)
        continue
      location, path = match
      ctx.replace(location, path, ref)

  def apply_replacements(self) -> None:
    """
    Consumes the collected replacements.

    A replacement that is the initializer of a declarator declaring the
    binding's own local name (``const Component = Ember.Component``) prunes
    that declarator; any other is replaced by the local name.
    """
    for replacement in self.ctx.replacements:
      declarator = prunable_declarator(replacement.location, replacement.binding.local_name)
      if declarator is not None:
        self.ctx.pruned_declarators.add(declarator.id)
        continue
      self.ctx.patcher.replace(replacement.location, replacement.binding.local_name)

  def rename(self, renames: Sequence[Tuple[Node, str, str]]) -> None:
    """
    Points references of an alias at the binding's local name.

    Shorthand object properties keep their key: ``{ get }`` becomes
    ``{ get: myGet }``.
    """
    for ref, name, local in renames:
      if ref.type == "shorthand_property_identifier":
        self.ctx.patcher.replace(ref, f"{name}: {local}")
      else:
        self.ctx.patcher.replace(ref, local)

  def prune(self, destructurings: Sequence[Destructuring]) -> None:
    """
    Emits deletions for resolved pattern properties and pruned declarators.
    """
    for item in destructurings:
      if item.pattern.is_empty:
        self.ctx.pruned_declarators.add(item.declarator.id)
      else:
        self._prune_pattern(item.pattern)

    by_statement: Dict[int, Tuple[Node, List[Node]]] = {}
    for node in self._pruned_declarator_nodes():
      statement = node.parent
      by_statement.setdefault(statement.id, (statement, declarators(statement)))

    for statement, items in by_statement.values():
      flags = [d.id in self.ctx.pruned_declarators for d in items]
      if all(flags):
        parent = statement.parent
        if parent is None or parent.type not in STATEMENT_PARENTS:
          raise TransformError("Cannot remove a declaration used as a loop initializer", statement)
        self.ctx.patcher.delete_statement(statement)
      else:
        self.ctx.patcher.delete_items(items, flags)

  def _pruned_declarator_nodes(self) -> List[Node]:
    found: List[Node] = []
    wanted = self.ctx.pruned_declarators
    for item in self.ctx.root.named_children:
      stack = [item]
      while stack:
        node = stack.pop()
        if node.type == "variable_declarator" and node.id in wanted:
          found.append(node)
        stack.extend(node.named_children)
    return found

  def _prune_pattern(self, record: PatternRecord) -> None:
    flags = [slot.pruned for slot in record.slots]
    if any(flags):
      self.ctx.patcher.delete_items([slot.node for slot in record.slots], flags)
    for slot in record.slots:
      if slot.child is not None and not slot.pruned:
        self._prune_pattern(slot.child)
