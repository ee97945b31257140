"""
Source Patcher for Byte-Range Surgery.

Every rewrite decision is recorded as a patch action against the original
source bytes; nothing is applied until :meth:`SourcePatcher.commit`. This keeps
a failed transform free of partial mutations: either every action is applied,
or a :class:`TransformError` is raised and the original text stands.

Actions whose range lies entirely inside a deleted range are subsumed by the
deletion. Any other overlap is a conflict.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from tree_sitter import Node

from ember_migrator.core.errors import TransformError


@dataclass
class PatchAction:
  """Base class for patch instructions over ``[start, end)``."""

  start: int
  end: int

  @property
  def text(self) -> str:
    return ""


@dataclass
class DeleteAction(PatchAction):
  """Removes a byte range."""

  pass


@dataclass
class ReplaceAction(PatchAction):
  """Replaces a byte range with new text."""

  replacement: str = ""

  @property
  def text(self) -> str:
    return self.replacement


@dataclass
class InsertAction(PatchAction):
  """Inserts text at an offset (``start == end``)."""

  insertion: str = ""

  @property
  def text(self) -> str:
    return self.insertion


class SourcePatcher:
  """
  Collects patch actions and applies them in one pass.
  """

  def __init__(self, source: bytes) -> None:
    self.source = source
    self.actions: List[PatchAction] = []

  def replace(self, node: Node, replacement: str) -> None:
    self.actions.append(ReplaceAction(node.start_byte, node.end_byte, replacement))

  def delete(self, start: int, end: int) -> None:
    if end > start:
      self.actions.append(DeleteAction(start, end))

  def insert(self, offset: int, insertion: str) -> None:
    self.actions.append(InsertAction(offset, offset, insertion))

  def delete_statement(self, node: Node) -> None:
    """
    Removes a statement, taking its whole line when it stands alone on it.

    Args:
        node: Statement node. A parent ``export_statement`` is removed instead.
    """
    if node.parent is not None and node.parent.type == "export_statement":
      node = node.parent
    start, end = node.start_byte, node.end_byte
    line_start = self.source.rfind(b"\n", 0, start) + 1
    line_end = self.source.find(b"\n", end)
    if line_end == -1:
      line_end = len(self.source)
    before = self.source[line_start:start]
    after = self.source[end:line_end]
    if not before.strip() and not after.strip():
      start = line_start
      end = min(line_end + 1, len(self.source))
    self.delete(start, end)

  def delete_items(self, items: Sequence[Node], removed: Sequence[bool]) -> None:
    """
    Removes entries of a comma-separated list, keeping the separators valid.

    A removed item followed by another item is cut up to that item's start.
    Removed items after the last kept one are cut from the end of the last
    kept item. At least one item must be kept.

    Args:
        items: List entries in source order.
        removed: Parallel flags.
    """
    kept = [i for i, flag in enumerate(removed) if not flag]
    if not kept:
      raise TransformError("Cannot remove every item of a list", items[0] if items else None)
    last_kept = kept[-1]
    for i, flag in enumerate(removed):
      if not flag:
        continue
      if i < last_kept:
        self.delete(items[i].start_byte, items[i + 1].start_byte)
    trailing = [i for i, flag in enumerate(removed) if flag and i > last_kept]
    if trailing:
      self.delete(items[last_kept].end_byte, items[trailing[-1]].end_byte)

  def commit(self) -> bytes:
    """
    Applies every recorded action.

    Returns:
        bytes: The patched source.

    Raises:
        TransformError: If two actions overlap without one being a deletion
            that contains the other.
    """
    actions = self._drop_subsumed(self.actions + self._fold_blank_lines())
    # Zero-width inserts sort before a range starting at the same offset.
    actions.sort(key=lambda a: (a.start, a.end))

    out: List[bytes] = []
    pos = 0
    previous: Optional[PatchAction] = None
    for action in actions:
      if action.start < pos:
        raise TransformError(f"Conflicting edits at bytes {previous.start}-{previous.end} and {action.start}-{action.end}")
      out.append(self.source[pos : action.start])
      out.append(action.text.encode("utf-8"))
      pos = action.end
      previous = action
    out.append(self.source[pos:])
    return b"".join(out)

  def _fold_blank_lines(self) -> List[PatchAction]:
    """
    Widens runs of deleted lines so they leave no stacked blank lines.

    Whole-line deletions separated only by blank lines merge into one run.
    A run sitting between two blank lines also takes the blank line after it.
    Runs never grow over an insertion point.

    Returns:
        List[PatchAction]: Deletions covering the merged runs.
    """
    source = self.source
    inserts = {a.start for a in self.actions if isinstance(a, InsertAction)}
    lines = sorted(
      (a for a in self.actions if isinstance(a, DeleteAction) and self._is_line_span(a.start, a.end)),
      key=lambda a: (a.start, a.end),
    )

    runs: List[List[int]] = []
    for action in lines:
      if runs:
        last = runs[-1]
        gap = source[last[1] : action.start]
        if action.start <= last[1] or (
          not gap.strip() and not any(last[1] < offset <= action.start for offset in inserts)
        ):
          last[1] = max(last[1], action.end)
          continue
      runs.append([action.start, action.end])

    folded: List[PatchAction] = []
    for start, end in runs:
      if start not in inserts and end not in inserts and self._blank_before(start):
        line_end = source.find(b"\n", end)
        if line_end != -1 and not source[end:line_end].strip():
          end = line_end + 1
      folded.append(DeleteAction(start, end))
    return folded

  def _is_line_span(self, start: int, end: int) -> bool:
    starts_line = start == 0 or self.source[start - 1 : start] == b"\n"
    ends_line = end == len(self.source) or self.source[end - 1 : end] == b"\n"
    return end > start and starts_line and ends_line

  def _blank_before(self, start: int) -> bool:
    if start == 0:
      return False
    line_start = self.source.rfind(b"\n", 0, start - 1) + 1
    return not self.source[line_start:start].strip()

  @staticmethod
  def _drop_subsumed(actions: List[PatchAction]) -> List[PatchAction]:
    deletions = [a for a in actions if isinstance(a, DeleteAction)]
    kept: List[PatchAction] = []
    seen = set()
    for action in actions:
      key = (type(action), action.start, action.end, action.text)
      if key in seen:
        continue
      seen.add(key)
      if any(_inside(action, d) for d in deletions if d is not action):
        continue
      kept.append(action)
    return kept


def _inside(action: PatchAction, deletion: PatchAction) -> bool:
  if not (deletion.start <= action.start and action.end <= deletion.end):
    return False
  if isinstance(action, InsertAction):
    return deletion.start < action.start < deletion.end
  if (action.start, action.end) == (deletion.start, deletion.end):
    return not isinstance(action, DeleteAction)
  return True
