"""
Lexical Scope Model.

A single pre-pass over the syntax tree that records every declaration and
every identifier reference, so later passes can ask whether a given use of a
name really refers to a given declaration. Scopes are kept in an arena (a flat
list addressed by index) with parent indices.

Scope-creating nodes:

- the program,
- function-like nodes (declarations, expressions, generators, arrows, methods),
- statement blocks that are not a function or catch body,
- ``for`` and ``for ... in/of`` headers,
- ``catch`` clauses,
- switch bodies,
- named class expressions.

Declaration placement follows JavaScript: ``var`` is hoisted to the nearest
function scope, ``let``/``const``/``class`` bind in the enclosing block, and
imports always bind at module level.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from tree_sitter import Node

from ember_migrator.core.syntax import FUNCTION_TYPES, text, walk

logger = logging.getLogger(__name__)

REFERENCE_TYPES = frozenset({"identifier", "shorthand_property_identifier"})


@dataclass
class Declaration:
  """
  A name introduced into a scope.

  Attributes:
      name: Declared identifier.
      node: The binding identifier node.
      kind: ``import``, ``var``, ``let``, ``const``, ``function``, ``class``,
          ``param`` or ``catch``.
      scope_index: Arena index of the owning scope.
  """

  name: str
  node: Node
  kind: str
  scope_index: int


@dataclass
class ScopeRecord:
  index: int
  parent: Optional[int]
  node_id: int
  is_function: bool
  names: Dict[str, Declaration] = field(default_factory=dict)


def pattern_identifiers(node: Node) -> List[Node]:
  """
  Collects the binding identifiers introduced by a declaration target.

  Args:
      node: An identifier or destructuring pattern.

  Returns:
      List[Node]: Identifier nodes in source order.
  """
  found: List[Node] = []
  stack = [node]
  while stack:
    current = stack.pop()
    kind = current.type
    if kind in ("identifier", "shorthand_property_identifier_pattern"):
      found.append(current)
    elif kind in ("object_pattern", "array_pattern"):
      stack.extend(reversed(current.named_children))
    elif kind == "pair_pattern":
      value = current.child_by_field_name("value")
      if value is not None:
        stack.append(value)
    elif kind in ("assignment_pattern", "object_assignment_pattern"):
      left = current.child_by_field_name("left")
      if left is not None:
        stack.append(left)
    elif kind == "rest_pattern":
      stack.extend(reversed(current.named_children))
  return found


class ScopeModel:
  """
  Arena of scopes plus the binding and reference sites of one program.
  """

  def __init__(self) -> None:
    self.scopes: List[ScopeRecord] = []
    self.references: List[Node] = []
    self._scope_by_node: Dict[int, int] = {}
    self._decl_by_node: Dict[int, Declaration] = {}
    self._binding_ids: Set[int] = set()
    self._refs_by_decl: Dict[int, List[Node]] = {}

  @classmethod
  def build(cls, root: Node) -> "ScopeModel":
    """
    Runs the pre-pass over a program.

    Args:
        root: The ``program`` node.

    Returns:
        ScopeModel: The populated model.
    """
    model = cls()
    model._new_scope(root, None, True)
    model._collect(root)
    model._index_references(root)
    logger.debug("Scope model: %d scopes, %d references", len(model.scopes), len(model.references))
    return model

  # --- Queries ---

  def scope_index_at(self, node: Node) -> int:
    """Index of the innermost scope containing ``node``."""
    current: Optional[Node] = node
    while current is not None:
      idx = self._scope_by_node.get(current.id)
      if idx is not None:
        return idx
      current = current.parent
    return 0

  def lookup(self, use: Node, name: Optional[str] = None) -> Optional[Declaration]:
    """
    Finds the declaration a use site refers to.

    Args:
        use: An identifier in reference position.
        name: Resolve this name at ``use`` instead of the node's own text.

    Returns:
        Optional[Declaration]: The nearest declaration of that name, or None
        for an implicit global.
    """
    name = name or text(use)
    idx: Optional[int] = self.scope_index_at(use)
    while idx is not None:
      scope = self.scopes[idx]
      decl = scope.names.get(name)
      if decl is not None:
        return decl
      idx = scope.parent
    return None

  def resolves(self, use: Node, expected: Optional[Declaration]) -> bool:
    """
    True iff the nearest declaration of ``use`` is exactly ``expected``.

    ``expected=None`` asks whether the name is undeclared everywhere.
    """
    found = self.lookup(use)
    if expected is None:
      return found is None
    return found is expected

  def declaration_of(self, binding: Node) -> Optional[Declaration]:
    """Returns the declaration created by a binding identifier node."""
    return self._decl_by_node.get(binding.id)

  def references_to(self, decl: Optional[Declaration], name: Optional[str] = None) -> List[Node]:
    """
    Lists every reference resolving to ``decl``.

    For ``decl=None`` the implicit-global references of ``name`` are returned.
    """
    if decl is not None:
      return list(self._refs_by_decl.get(decl.node.id, []))
    return [r for r in self.references if text(r) == name and self.lookup(r) is None]

  # --- Construction ---

  def _new_scope(self, node: Node, parent: Optional[int], is_function: bool) -> int:
    idx = len(self.scopes)
    self.scopes.append(ScopeRecord(idx, parent, node.id, is_function))
    self._scope_by_node[node.id] = idx
    return idx

  def _function_scope(self, idx: int) -> int:
    current: Optional[int] = idx
    while current is not None:
      scope = self.scopes[current]
      if scope.is_function or scope.parent is None:
        return current
      current = scope.parent
    return 0

  def _declare(self, ident: Node, kind: str, scope_index: int) -> None:
    self._binding_ids.add(ident.id)
    name = text(ident)
    names = self.scopes[scope_index].names
    decl = names.get(name)
    if decl is None:
      decl = Declaration(name, ident, kind, scope_index)
      names[name] = decl
    self._decl_by_node[ident.id] = decl

  def _declare_pattern(self, target: Optional[Node], kind: str, scope_index: int) -> None:
    if target is None:
      return
    for ident in pattern_identifiers(target):
      self._declare(ident, kind, scope_index)

  def _opens_scope(self, node: Node) -> Optional[bool]:
    """Returns None if ``node`` opens no scope, else whether it is a function scope."""
    kind = node.type
    if kind in FUNCTION_TYPES:
      return True
    if kind == "statement_block":
      parent = node.parent
      if parent is not None and (parent.type in FUNCTION_TYPES or parent.type == "catch_clause"):
        return None
      return False
    if kind in ("for_statement", "for_in_statement", "catch_clause", "switch_body"):
      return False
    if kind == "class" and node.child_by_field_name("name") is not None:
      return False
    return None

  def _collect(self, root: Node) -> None:
    stack = [(c, 0) for c in reversed(root.children)]
    while stack:
      node, scope = stack.pop()
      kind = node.type

      if kind == "import_statement":
        self._collect_import(node)
        continue

      if kind in ("function_declaration", "generator_function_declaration", "class_declaration"):
        name = node.child_by_field_name("name")
        if name is not None:
          self._declare(name, "class" if kind == "class_declaration" else "function", scope)

      opens = self._opens_scope(node)
      if opens is not None:
        scope = self._new_scope(node, scope, opens)
        self._declare_scope_bindings(node, scope)

      if kind == "variable_declaration":
        target = self._function_scope(scope)
        for decl in node.named_children:
          if decl.type == "variable_declarator":
            self._declare_pattern(decl.child_by_field_name("name"), "var", target)
      elif kind == "lexical_declaration":
        keyword = text(node.children[0]) if node.children else "let"
        for decl in node.named_children:
          if decl.type == "variable_declarator":
            self._declare_pattern(decl.child_by_field_name("name"), keyword, scope)

      stack.extend((c, scope) for c in reversed(node.children))

  def _declare_scope_bindings(self, node: Node, scope: int) -> None:
    kind = node.type
    if kind in FUNCTION_TYPES:
      if kind in ("function_expression", "function", "generator_function"):
        name = node.child_by_field_name("name")
        if name is not None:
          self._declare(name, "function", scope)
      params = node.child_by_field_name("parameters")
      if params is not None:
        for param in params.named_children:
          if param.type != "comment":
            self._declare_pattern(param, "param", scope)
      single = node.child_by_field_name("parameter")
      if single is not None:
        self._declare_pattern(single, "param", scope)
    elif kind == "catch_clause":
      self._declare_pattern(node.child_by_field_name("parameter"), "catch", scope)
    elif kind == "class":
      self._declare(node.child_by_field_name("name"), "class", scope)
    elif kind == "for_in_statement":
      keyword = node.child_by_field_name("kind")
      left = node.child_by_field_name("left")
      if keyword is not None and left is not None:
        word = text(keyword)
        target = self._function_scope(scope) if word == "var" else scope
        self._declare_pattern(left, word, target)

  def _collect_import(self, node: Node) -> None:
    for child in node.named_children:
      if child.type != "import_clause":
        continue
      for part in child.named_children:
        if part.type == "identifier":
          self._declare(part, "import", 0)
        elif part.type == "namespace_import":
          for ident in part.named_children:
            if ident.type == "identifier":
              self._declare(ident, "import", 0)
        elif part.type == "named_imports":
          for spec in part.named_children:
            if spec.type != "import_specifier":
              continue
            local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
            if local is not None and local.type == "identifier":
              self._declare(local, "import", 0)
            for ident in spec.named_children:
              self._binding_ids.add(ident.id)

  def _index_references(self, root: Node) -> None:
    for node in walk(root):
      if node.type not in REFERENCE_TYPES or node.id in self._binding_ids:
        continue
      parent = node.parent
      if parent is not None and parent.type == "export_specifier":
        alias = parent.child_by_field_name("alias")
        if alias is not None and alias.id == node.id:
          continue
      self.references.append(node)
      decl = self.lookup(node)
      if decl is not None:
        self._refs_by_decl.setdefault(decl.node.id, []).append(node)
