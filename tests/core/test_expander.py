"""
Tests for member path expansion and longest-match resolution.
"""

from ember_migrator.core.rewriter.expander import expand, first_match
from ember_migrator.core.syntax import parse, text, walk
from ember_migrator.semantics.mapping import ImportSpec, MappingTable


def root_identifier(code, name):
  tree = parse(code.encode("utf-8"))
  return next(n for n in walk(tree.root_node) if n.type == "identifier" and text(n) == name)


def test_expand_lists_most_specific_first():
  ident = root_identifier("Ember.computed.or('a');", "Ember")
  candidates = expand(ident)
  assert [path for _, path in candidates] == ["computed.or", "computed"]
  assert text(candidates[0][0]) == "Ember.computed.or"


def test_expand_with_namespace_prefix():
  ident = root_identifier("computed.alias('router');", "computed")
  assert [path for _, path in expand(ident, "computed")] == ["computed.alias"]


def test_expand_stops_at_computed_access():
  ident = root_identifier("Ember.String['camelize'];", "Ember")
  assert [path for _, path in expand(ident)] == ["String"]


def test_expand_without_member_access():
  ident = root_identifier("foo(Ember);", "Ember")
  assert expand(ident) == []


def test_first_match_prefers_longest_path():
  table = MappingTable(
    {
      "computed": ImportSpec("@ember/object", "computed"),
      "computed.or": ImportSpec("@ember/object/computed", "or"),
    }
  )
  ident = root_identifier("Ember.computed.or('a');", "Ember")
  location, path = first_match(expand(ident), table)
  assert path == "computed.or"
  assert text(location) == "Ember.computed.or"


def test_first_match_falls_back_to_shorter_path():
  table = MappingTable({"run": ImportSpec("@ember/runloop", "run")})
  ident = root_identifier("Ember.run.unknownThing();", "Ember")
  location, path = first_match(expand(ident), table)
  assert path == "run"
  assert text(location) == "Ember.run"


def test_first_match_without_candidates():
  ident = root_identifier("Ember.unknownThing();", "Ember")
  assert first_match(expand(ident), MappingTable()) is None
