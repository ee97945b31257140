"""
Import Declaration Model.

A small editable view of one ``import`` statement: its source, default and
named specifiers. Existing statements are read from the syntax tree; new ones
are synthesized empty. A declaration that gains or loses specifiers is
re-rendered in full.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from tree_sitter import Node

from ember_migrator.core.syntax import string_value, text


@dataclass
class NamedSpecifier:
  export_name: str
  local_name: str

  def render(self) -> str:
    if self.export_name == self.local_name:
      return self.local_name
    return f"{self.export_name} as {self.local_name}"


@dataclass(eq=False)
class ImportDeclaration:
  """
  One import statement, existing or synthesized.

  Attributes:
      source: Module specifier.
      quote: Quote character used for the source.
      node: The ``import_statement`` node, None when synthesized.
      default: Local name of the default specifier.
      namespace: Local name of a ``* as ns`` specifier.
      named: Named specifiers in order.
      semicolon: Whether the statement ends with ``;``.
      dirty: Set once the specifier list changed.
      removed: Set when the statement must be deleted.
  """

  source: str
  quote: str = "'"
  node: Optional[Node] = None
  default: Optional[str] = None
  namespace: Optional[str] = None
  named: List[NamedSpecifier] = field(default_factory=list)
  semicolon: bool = True
  dirty: bool = False
  removed: bool = False

  @classmethod
  def from_node(cls, node: Node) -> Optional["ImportDeclaration"]:
    """
    Reads an ``import_statement``.

    Args:
        node: The statement.

    Returns:
        Optional[ImportDeclaration]: None for imports without a source.
    """
    source = node.child_by_field_name("source")
    if source is None:
      return None
    raw = text(source)
    decl = cls(
      source=string_value(source),
      quote=raw[0] if raw[:1] in ("'", '"') else "'",
      node=node,
      semicolon=bool(node.children) and node.children[-1].type == ";",
    )
    for clause in node.named_children:
      if clause.type != "import_clause":
        continue
      for part in clause.named_children:
        if part.type == "identifier":
          decl.default = text(part)
        elif part.type == "namespace_import":
          idents = [c for c in part.named_children if c.type == "identifier"]
          if idents:
            decl.namespace = text(idents[0])
        elif part.type == "named_imports":
          for spec in part.named_children:
            if spec.type != "import_specifier":
              continue
            name = spec.child_by_field_name("name")
            alias = spec.child_by_field_name("alias")
            if name is None:
              continue
            export = string_value(name) if name.type == "string" else text(name)
            local = text(alias) if alias is not None else export
            decl.named.append(NamedSpecifier(export, local))
    return decl

  @property
  def is_empty(self) -> bool:
    return self.default is None and self.namespace is None and not self.named

  def specifiers(self) -> List[Tuple[str, str]]:
    """Lists ``(export_name, local_name)`` pairs, default first."""
    pairs: List[Tuple[str, str]] = []
    if self.default is not None:
      pairs.append(("default", self.default))
    pairs.extend((s.export_name, s.local_name) for s in self.named)
    return pairs

  def add(self, export_name: str, local_name: str) -> None:
    """
    Adds a specifier; default specifiers always render before named ones.
    """
    if export_name == "default":
      self.default = local_name
    else:
      self.named.append(NamedSpecifier(export_name, local_name))
    self.dirty = True

  def drop_default(self) -> None:
    self.default = None
    self.dirty = True
    if self.is_empty:
      self.removed = True

  def render(self, wrap_width: int = 50, newline: str = "\n") -> str:
    """
    Renders the statement.

    The ``import ... from`` head is wrapped to one named specifier per line
    when it is longer than ``wrap_width``.

    Args:
        wrap_width: Maximum head length before wrapping.
        newline: Line terminator used between wrapped specifiers.

    Returns:
        str: The statement text without a trailing newline.
    """
    leading: List[str] = []
    if self.default is not None:
      leading.append(self.default)
    if self.namespace is not None:
      leading.append(f"* as {self.namespace}")

    names = [s.render() for s in self.named]
    head = "import "
    if names:
      inline = ", ".join(leading + ["{ " + ", ".join(names) + " }"])
      if len(f"import {inline} from") > wrap_width:
        body = "".join(f"{newline}  {n}," for n in names)[:-1]
        head += ", ".join(leading + ["{" + body + newline + "}"])
      else:
        head += inline
    else:
      head += ", ".join(leading)

    end = ";" if self.semicolon else ""
    return f"{head} from {self.quote}{self.source}{self.quote}{end}"
