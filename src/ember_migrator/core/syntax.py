"""
Tree-sitter Adapter.

Parses JavaScript source into a concrete syntax tree and provides the small
set of node helpers the analysis and rewrite passes share. Source is handled
as UTF-8 bytes throughout so node byte offsets can be used directly as edit
ranges.
"""

from typing import Iterator, List, Optional, Tuple

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser, Tree

from ember_migrator.core.errors import TransformError

JS_LANGUAGE = Language(tree_sitter_javascript.language())

FUNCTION_TYPES = frozenset(
  {
    "function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "generator_function_declaration",
    "arrow_function",
    "method_definition",
  }
)


def parse(source: bytes) -> Tree:
  """
  Parses JavaScript bytes.

  Args:
      source: UTF-8 encoded program text.

  Returns:
      Tree: The syntax tree.

  Raises:
      TransformError: If the program contains syntax errors.
  """
  tree = Parser(JS_LANGUAGE).parse(source)
  if tree.root_node.has_error:
    raise TransformError("Unable to parse source", _first_error(tree.root_node))
  return tree


def _first_error(root: Node) -> Optional[Node]:
  for node in walk(root):
    if node.type == "ERROR" or node.is_missing:
      return node
  return None


def walk(root: Node) -> Iterator[Node]:
  """Yields every node below ``root`` (inclusive) in document order."""
  stack = [root]
  while stack:
    node = stack.pop()
    yield node
    stack.extend(reversed(node.children))


def text(node: Node) -> str:
  return node.text.decode("utf-8")


def string_value(node: Node) -> str:
  """Returns the contents of a string literal node without its quotes."""
  raw = text(node)
  return raw[1:-1] if len(raw) >= 2 else raw


def is_member_object(node: Node) -> bool:
  """True if ``node`` is the ``object`` of its parent member expression."""
  parent = node.parent
  if parent is None or parent.type != "member_expression":
    return False
  obj = parent.child_by_field_name("object")
  return obj is not None and obj.id == node.id


def is_call_target(node: Node) -> bool:
  """True if ``node`` is the callee of its parent call expression."""
  parent = node.parent
  if parent is None or parent.type != "call_expression":
    return False
  fn = parent.child_by_field_name("function")
  return fn is not None and fn.id == node.id


def member_property(node: Node) -> Optional[str]:
  """
  Returns the static property name of a member expression.

  Private names (``a.#b``) are not member paths.
  """
  prop = node.child_by_field_name("property")
  if prop is None or prop.type != "property_identifier":
    return None
  return text(prop)


def member_chain(node: Node) -> Optional[Tuple[Node, List[str]]]:
  """
  Decomposes ``a.b.c`` into its root identifier and property names.

  Args:
      node: A member expression or identifier.

  Returns:
      Optional[Tuple[Node, List[str]]]: ``(root, ["b", "c"])``, or None if the
      chain contains computed or private accesses or a non-identifier root.
  """
  props: List[str] = []
  current = node
  while current.type == "member_expression":
    name = member_property(current)
    if name is None:
      return None
    props.append(name)
    current = current.child_by_field_name("object")
  if current.type != "identifier":
    return None
  props.reverse()
  return current, props


def declarator_of_value(node: Node) -> Optional[Node]:
  """Returns the variable declarator whose initializer is ``node``."""
  parent = node.parent
  if parent is None or parent.type != "variable_declarator":
    return None
  value = parent.child_by_field_name("value")
  if value is None or value.id != node.id:
    return None
  return parent


def declarators(statement: Node) -> List[Node]:
  return [c for c in statement.named_children if c.type == "variable_declarator"]


def line_terminator(source: bytes) -> str:
  return "\r\n" if b"\r\n" in source else "\n"
