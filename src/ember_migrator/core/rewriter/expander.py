"""
Member Path Expansion.

Turns a reference to the global (or to a namespace alias) into the candidate
member paths it could stand for. For ``Ember.computed.or('a')`` the root
``Ember`` yields ``computed.or`` (at the outer member expression) then
``computed`` (at the inner one). Resolution picks the first candidate present
in the mapping table, so the longest match wins.
"""

from typing import List, Optional, Tuple

from tree_sitter import Node

from ember_migrator.core.syntax import is_member_object, member_property
from ember_migrator.semantics.mapping import MappingTable

Candidate = Tuple[Node, str]


def expand(root: Node, prefix: str = "") -> List[Candidate]:
  """
  Lists ``(location, path)`` pairs from most to least specific.

  Walks outward through enclosing member expressions while the current node
  is their object. Computed and private accesses stop the walk.

  Args:
      root: Identifier at the base of the chain.
      prefix: Member path ``root`` already stands for (``computed`` for a
          namespace alias, empty for the global).

  Returns:
      List[Candidate]: Empty when ``root`` is not the object of a member access.
  """
  parts = [prefix] if prefix else []
  pairs: List[Candidate] = []
  current = root
  while is_member_object(current):
    parent = current.parent
    name = member_property(parent)
    if name is None:
      break
    parts.append(name)
    pairs.append((parent, ".".join(parts)))
    current = parent
  pairs.reverse()
  return pairs


def first_match(candidates: List[Candidate], mapping: MappingTable) -> Optional[Candidate]:
  for location, path in candidates:
    if path in mapping:
      return location, path
  return None
