"""
Engine Exceptions.
"""

from typing import Optional

from tree_sitter import Node

from ember_migrator.core.reporter import MigrationWarning


class TransformError(Exception):
  """
  Raised when a file cannot be transformed safely.

  Covers syntax errors in the input, node shapes the engine does not model,
  and conflicting edits. No edit has been applied when this is raised.

  Attributes:
      node: The offending node, when known.
      warning: The ``internal-error`` record, attached by the engine entry point.
  """

  def __init__(self, message: str, node: Optional[Node] = None) -> None:
    if node is not None:
      message = f"{message} (line {node.start_point[0] + 1})"
    super().__init__(message)
    self.node = node
    self.warning: Optional[MigrationWarning] = None
