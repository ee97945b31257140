"""
Warning Accumulator.

Collects the non-fatal findings of one file transform. Each finding is a
:class:`MigrationWarning` carrying the 1-based line of the offending node and a
context snippet of the surrounding source (two lines above and below).
Internal errors are recorded with their stack trace and a snapshot of the
original file so the report can reproduce them.
"""

import traceback
from typing import List, Optional

from pydantic import BaseModel, Field
from tree_sitter import Node

from ember_migrator.enums import WarningKind

CONTEXT_MARGIN = 2


class MigrationWarning(BaseModel):
  """
  A single unresolved or unsupported usage.
  """

  kind: WarningKind
  subject: str = Field(description="Member path, or the exception message for internal errors.")
  line: int = Field(0, description="1-based line of the usage.")
  file_path: str = ""
  context: str = Field("", description="Source lines around the usage.")
  stack: Optional[str] = Field(None, description="Stack trace (internal errors only).")
  source: Optional[str] = Field(None, description="Original file text (internal errors only).")

  @property
  def is_error(self) -> bool:
    return self.kind == WarningKind.INTERNAL_ERROR


def context_snippet(lines: List[str], line: int, margin: int = CONTEXT_MARGIN) -> str:
  """
  Extracts the lines surrounding ``line``.

  Args:
      lines: Source split into lines.
      line: 1-based line number.
      margin: Lines of context on each side.

  Returns:
      str: The snippet, newline-joined.
  """
  start = max(0, line - 1 - margin)
  return "\n".join(lines[start : line + margin])


class WarningCollector:
  """
  Per-invocation warning sink.
  """

  def __init__(self, source_text: str, file_path: str = "") -> None:
    self.file_path = file_path
    self._lines = source_text.splitlines()
    self._warnings: List[MigrationWarning] = []

  def add(self, kind: WarningKind, subject: str, node: Optional[Node] = None) -> MigrationWarning:
    """
    Records a warning anchored at ``node``.

    Args:
        kind: Warning category.
        subject: Member path the warning is about.
        node: Offending syntax node; its start row gives the line.

    Returns:
        MigrationWarning: The recorded warning.
    """
    line = node.start_point[0] + 1 if node is not None else 0
    warning = MigrationWarning(
      kind=kind,
      subject=subject,
      line=line,
      file_path=self.file_path,
      context=context_snippet(self._lines, line) if line else "",
    )
    self._warnings.append(warning)
    return warning

  @property
  def warnings(self) -> List[MigrationWarning]:
    return list(self._warnings)

  def __len__(self) -> int:
    return len(self._warnings)


def internal_error(exc: BaseException, source_text: str, file_path: str = "") -> MigrationWarning:
  """
  Builds the warning record for an unexpected failure.

  Args:
      exc: The raised exception.
      source_text: Original file contents.
      file_path: File being transformed.

  Returns:
      MigrationWarning: An ``internal-error`` record with stack and source.
  """
  stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
  return MigrationWarning(
    kind=WarningKind.INTERNAL_ERROR,
    subject=str(exc) or type(exc).__name__,
    file_path=file_path,
    stack=stack,
    source=source_text,
  )
