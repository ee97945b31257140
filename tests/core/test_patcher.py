"""
Tests for the byte-range SourcePatcher.

Verifies:
1. Actions are applied in offset order regardless of recording order.
2. Edits inside a deleted range are dropped.
3. Overlapping non-nested edits raise.
4. Statement and list-item deletion keep the surrounding text valid.
"""

import pytest

from ember_migrator.core.errors import TransformError
from ember_migrator.core.rewriter.patcher import SourcePatcher
from ember_migrator.core.syntax import declarators, parse, walk


def nodes(source, node_type):
  tree = parse(source)
  return [n for n in walk(tree.root_node) if n.type == node_type]


def test_commit_without_actions_is_identity():
  patcher = SourcePatcher(b"const a = 1;\n")
  assert patcher.commit() == b"const a = 1;\n"


def test_actions_apply_in_offset_order():
  source = b"abcdef"
  patcher = SourcePatcher(source)
  patcher.delete(4, 5)
  patcher.insert(0, ">")
  patcher.delete(1, 2)
  assert patcher.commit() == b">acdf"


def test_edit_inside_deletion_is_subsumed():
  source = b"const x = Ember.A;\nEmber.B;\n"
  (member, _) = nodes(source, "member_expression")
  patcher = SourcePatcher(source)
  patcher.replace(member, "A")
  patcher.delete(0, 19)
  assert patcher.commit() == b"Ember.B;\n"


def test_insert_at_deletion_start_survives():
  patcher = SourcePatcher(b"old;\nkeep;\n")
  patcher.insert(0, "new;\n")
  patcher.delete(0, 5)
  assert patcher.commit() == b"new;\nkeep;\n"


def test_overlapping_edits_raise():
  patcher = SourcePatcher(b"abcdef")
  patcher.delete(0, 3)
  patcher.delete(2, 5)
  with pytest.raises(TransformError):
    patcher.commit()


def test_duplicate_actions_are_applied_once():
  patcher = SourcePatcher(b"abc")
  patcher.delete(0, 1)
  patcher.delete(0, 1)
  assert patcher.commit() == b"bc"


def test_delete_statement_takes_the_whole_line():
  source = b"a();\nconst C = Ember.Component;\nb();\n"
  (statement,) = nodes(source, "lexical_declaration")
  patcher = SourcePatcher(source)
  patcher.delete_statement(statement)
  assert patcher.commit() == b"a();\nb();\n"


def test_delete_statement_shares_line():
  source = b"a(); const C = 1; b();\n"
  (statement,) = nodes(source, "lexical_declaration")
  patcher = SourcePatcher(source)
  patcher.delete_statement(statement)
  assert patcher.commit() == b"a();  b();\n"


@pytest.mark.parametrize(
  "removed,expected",
  [
    ([True, False, False], b"const { b, c } = Ember;\n"),
    ([False, True, False], b"const { a, c } = Ember;\n"),
    ([False, False, True], b"const { a, b } = Ember;\n"),
    ([True, False, True], b"const { b } = Ember;\n"),
  ],
)
def test_delete_items_keeps_separators(removed, expected):
  source = b"const { a, b, c } = Ember;\n"
  (pattern,) = nodes(source, "object_pattern")
  items = list(pattern.named_children)
  patcher = SourcePatcher(source)
  patcher.delete_items(items, removed)
  assert patcher.commit() == expected


def test_delete_items_refuses_to_empty_a_list():
  source = b"const { a } = Ember;\n"
  (pattern,) = nodes(source, "object_pattern")
  patcher = SourcePatcher(source)
  with pytest.raises(TransformError):
    patcher.delete_items(list(pattern.named_children), [True])


def test_delete_items_on_declarators():
  source = b"const a = Ember.A, b = 2;\n"
  (statement,) = nodes(source, "lexical_declaration")
  patcher = SourcePatcher(source)
  patcher.delete_items(declarators(statement), [True, False])
  assert patcher.commit() == b"const b = 2;\n"


def test_blank_lines_between_deleted_statements_are_folded():
  source = b"a();\n\nb();\nc();\n\nd();\n"
  statements = nodes(source, "expression_statement")
  patcher = SourcePatcher(source)
  patcher.insert(0, "new();\n")
  for statement in statements[:3]:
    patcher.delete_statement(statement)
  assert patcher.commit() == b"new();\n\nd();\n"


def test_run_between_blank_lines_takes_the_blank_after_it():
  source = b"a();\n\nb();\n\nc();\n\nd();\n"
  statements = nodes(source, "expression_statement")
  patcher = SourcePatcher(source)
  patcher.delete_statement(statements[1])
  patcher.delete_statement(statements[2])
  assert patcher.commit() == b"a();\n\nd();\n"


def test_folding_stops_at_insertion_points():
  source = b"a();\n\nb();\n\nc();\n"
  statements = nodes(source, "expression_statement")
  patcher = SourcePatcher(source)
  patcher.delete_statement(statements[0])
  patcher.insert(statements[1].start_byte, "new();\n")
  patcher.delete_statement(statements[1])
  assert patcher.commit() == b"\nnew();\n\nc();\n"
