"""
Tests for the Migration Engine pipeline.

Covers the core behaviours end to end on small inputs:
1. Direct usages, longest match and reserved local names.
2. Destructuring, chained and root aliases.
3. Namespace handling under both policies.
4. Warnings for unresolved usages and internal errors.
"""

import pytest

from ember_migrator.config import MigrationConfig
from ember_migrator.core.engine import MigrationEngine, transform
from ember_migrator.core.errors import TransformError
from ember_migrator.enums import NamespacePolicy, WarningKind
from ember_migrator.semantics.mapping import MappingTable, load_reserved_names


@pytest.fixture(scope="module")
def table():
  return MappingTable.load()


@pytest.fixture(scope="module")
def reserved():
  return load_reserved_names()


@pytest.fixture
def run(table, reserved):
  def _run(code, **settings):
    return transform(code, table, reserved, MigrationConfig(**settings), "app/test.js")

  return _run


def test_destructured_inject_becomes_service_import(run):
  """Scenario A: `inject.service()` through a destructured namespace."""
  code = """import Ember from 'ember';
const { inject } = Ember;

export default Ember.Component.extend({
  store: inject.service()
});
"""
  output, warnings = run(code)
  assert output == """import Component from '@ember/component';
import { inject as service } from '@ember/service';

export default Component.extend({
  store: service()
});
"""
  assert warnings == []


def test_longest_match_and_reserved_name(run):
  """Scenario B: `Ember.computed.or` resolves to the macro, not `computed`."""
  code = """import Ember from 'ember';
export default Ember.Object.extend({
  isActive: Ember.computed.or('a', 'b')
});
"""
  output, warnings = run(code)
  assert output == """import EmberObject from '@ember/object';
import { or } from '@ember/object/computed';
export default EmberObject.extend({
  isActive: or('a', 'b')
});
"""
  assert warnings == []


def test_unknown_global_is_reported(run):
  """Scenario C: an unmapped member is left alone and reported once."""
  code = "import Ember from 'ember';\n\nEmber.unknownThing();\n"
  output, warnings = run(code)
  assert output == code
  assert len(warnings) == 1
  warning = warnings[0]
  assert warning.kind == WarningKind.MISSING_GLOBAL
  assert warning.subject == "unknownThing"
  assert warning.line == 3
  assert warning.file_path == "app/test.js"
  assert "Ember.unknownThing();" in warning.context


def test_shadowed_global_is_untouched(run):
  """Scenario D: a nested local named like the global is never rewritten."""
  code = """function f() {
  let Ember = {};
  Ember.Component = 1;
  return Ember.run;
}
"""
  output, warnings = run(code)
  assert output == code
  assert warnings == []


def test_implicit_global_without_import(run):
  output, warnings = run("Ember.run.later(fn, 10);\n")
  assert output == "import { later } from '@ember/runloop';\nlater(fn, 10);\n"
  assert warnings == []


def test_root_alias_is_followed_and_pruned(run):
  code = "import Ember from 'ember';\nconst E = Ember;\nE.run();\n"
  output, _ = run(code)
  assert output == "import { run } from '@ember/runloop';\nrun();\n"


def test_manual_alias_with_same_name_is_removed(run):
  code = "import Ember from 'ember';\nconst Component = Ember.Component;\nexport default Component.extend();\n"
  output, _ = run(code)
  assert output == "import Component from '@ember/component';\nexport default Component.extend();\n"


def test_manual_alias_with_other_name_is_replaced(run):
  code = "import Ember from 'ember';\nconst C = Ember.Component;\nexport default C.extend();\n"
  output, _ = run(code)
  assert output == "import Component from '@ember/component';\nconst C = Component;\nexport default C.extend();\n"


def test_existing_rename_is_reused_for_shorthand(run):
  code = """import { observer as watch } from '@ember/object';
import Ember from 'ember';
const { observer } = Ember;
export default { observer, x: observer('a', fn) };
"""
  output, warnings = run(code)
  assert output == """import { observer as watch } from '@ember/object';
export default { observer: watch, x: watch('a', fn) };
"""
  assert warnings == []


def test_default_joins_existing_named_import(run):
  code = """import { computed } from '@ember/object';
import Ember from 'ember';
export default Ember.Object.extend({ a: Ember.computed() });
"""
  output, _ = run(code)
  assert output == """import EmberObject, { computed } from '@ember/object';
export default EmberObject.extend({ a: computed() });
"""


def test_partial_destructuring_keeps_unresolved_members(run):
  code = """import Ember from 'ember';
const { run, Foo } = Ember;
run(() => Foo.bar());
"""
  output, warnings = run(code)
  assert "import { run } from '@ember/runloop';" in output
  assert "const { Foo } = Ember;" in output
  assert "import Ember from 'ember';" in output
  assert [(w.kind, w.subject, w.line) for w in warnings] == [(WarningKind.MISSING_GLOBAL, "Foo", 2)]


def test_chained_destructuring_resolves_bottom_up(run):
  code = """import Ember from 'ember';
const { computed } = Ember;
const { oneWay } = computed;
export default { name: oneWay('userName') };
"""
  output, warnings = run(code)
  assert output == """import { oneWay } from '@ember/object/computed';
export default { name: oneWay('userName') };
"""
  assert warnings == []


def test_namespace_alias_kept_only_when_called(run):
  code = """import Ember from 'ember';
const { computed } = Ember;
export default { a: computed.alias('b') };
"""
  output, _ = run(code)
  assert "import { alias } from '@ember/object/computed';" in output
  assert "@ember/object'" not in output

  kept, _ = run(code, namespace_policy=NamespacePolicy.ALWAYS_KEEP)
  assert "import { alias } from '@ember/object/computed';" in kept
  assert "import { computed } from '@ember/object';" in kept


def test_ambiguous_namespace_usage_is_reported(run):
  code = """import Ember from 'ember';
const { computed } = Ember;
export default {
  a: computed.alias('b'),
  c: computed(function() {})
};
"""
  output, warnings = run(code)
  assert "import { alias } from '@ember/object/computed';" in output
  assert "import { computed } from '@ember/object';" in output
  assert [(w.kind, w.subject) for w in warnings] == [(WarningKind.AMBIGUOUS_NAMESPACE_USAGE, "computed")]

  _, quiet = run(code, warn_ambiguous_namespaces=False)
  assert quiet == []


def test_unknown_namespace_member_is_reported(run):
  code = """import { computed } from '@ember/object';
export default { a: computed.foo('bar'), b: computed.not('c') };
"""
  output, warnings = run(code)
  assert "computed.foo('bar')" in output
  assert "b: not('c')" in output
  assert [(w.kind, w.subject) for w in warnings] == [(WarningKind.MISSING_NAMESPACE_MEMBER, "computed.foo")]


def test_unsupported_destructuring_is_flagged(run):
  code = "import Ember from 'ember';\nconst { computed: [first] } = Ember;\n"
  output, warnings = run(code)
  assert output == code
  assert [(w.kind, w.subject) for w in warnings] == [(WarningKind.UNSUPPORTED_DESTRUCTURING, "computed")]


def test_new_imports_follow_header_comments_and_directives(run):
  code = "// header\n'use strict';\nEmber.run();\n"
  output, _ = run(code)
  assert output == "// header\n'use strict';\nimport { run } from '@ember/runloop';\nrun();\n"


def test_quote_and_wrap_settings(run):
  code = "Ember.Object.extend({ a: Ember.get(this, 'a'), b: Ember.computed() });\n"
  output, _ = run(code, quote="double", import_wrap_width=20)
  assert output.startswith('import EmberObject, {\n  get,\n  computed\n} from "@ember/object";\n')


def test_migration_is_idempotent(run, load_fixture):
  once, _ = run(load_fixture("final_boss"))
  twice, warnings = run(once)
  assert twice == once
  assert warnings == []


def test_syntax_error_raises_with_warning(run):
  with pytest.raises(TransformError) as exc:
    run("const = ;")
  warning = exc.value.warning
  assert warning is not None
  assert warning.kind == WarningKind.INTERNAL_ERROR
  assert warning.source == "const = ;"
  assert "TransformError" in warning.stack


def test_loop_initializer_pruning_is_an_internal_error(run):
  code = "import Ember from 'ember';\nfor (const { run } = Ember; ;) { run(); }\n"
  with pytest.raises(TransformError):
    run(code)


def test_engine_never_raises(table, reserved):
  engine = MigrationEngine(table, reserved_names=reserved)
  result = engine.run("const = ;", file_path="app/broken.js")
  assert not result.success
  assert result.code == "const = ;"
  assert result.errors[0].file_path == "app/broken.js"


def test_engine_reports_changes(table, reserved):
  engine = MigrationEngine(table, reserved_names=reserved)
  assert engine.run("Ember.run();\n").changed
  assert not engine.run("const a = 1;\n").changed


def test_empty_mapping_table_reports_everything(reserved):
  engine = MigrationEngine(MappingTable(), reserved_names=reserved)
  result = engine.run("Ember.run();\n")
  assert result.code == "Ember.run();\n"
  assert [w.subject for w in result.warnings] == ["run"]


def test_manual_namespace_alias_is_removed_once_unused(run):
  code = """import Ember from 'ember';
const c = Ember.computed;
export default { a: c.alias('x'), b: c.or('a', 'b') };
"""
  output, warnings = run(code)
  assert output == """import { alias, or } from '@ember/object/computed';
export default { a: alias('x'), b: or('a', 'b') };
"""
  assert warnings == []


def test_manual_namespace_alias_is_kept_while_called(run):
  code = """import Ember from 'ember';
const c = Ember.computed;
export default { a: c.alias('x'), b: c(fn) };
"""
  output, _ = run(code)
  assert "import { computed } from '@ember/object';" in output
  assert "const c = computed;" in output
  assert "a: alias('x')" in output
  assert "b: c(fn)" in output


def test_manual_namespace_alias_survives_always_keep(run):
  code = "import Ember from 'ember';\nconst c = Ember.computed;\nexport default { a: c.alias('x') };\n"
  output, _ = run(code, namespace_policy=NamespacePolicy.ALWAYS_KEEP)
  assert "const c = computed;" in output
  assert "import { computed } from '@ember/object';" in output


def test_local_name_captured_by_inner_binding_is_reported(run):
  code = """import Ember from 'ember';
function f(alias) {
  return Ember.computed.alias('x');
}
export const b = Ember.computed.alias('y');
"""
  output, warnings = run(code)
  assert output == """import { alias } from '@ember/object/computed';
import Ember from 'ember';
function f(alias) {
  return Ember.computed.alias('x');
}
export const b = alias('y');
"""
  assert [(w.kind, w.subject, w.line) for w in warnings] == [
    (WarningKind.SHADOWED_LOCAL_NAME, "computed.alias", 3),
  ]


def test_removed_lines_leave_no_stacked_blank_lines(run):
  code = """import Ember from 'ember';
a();

const Component = Ember.Component;

const { run } = Ember;

export default Component.extend({ go: run });
"""
  output, _ = run(code)
  assert output == """import { run } from '@ember/runloop';
import Component from '@ember/component';
a();

export default Component.extend({ go: run });
"""


def test_crlf_line_endings_are_kept(run):
  code = "import Ember from 'ember';\r\nexport default Ember.Object.extend({ a: Ember.get(this, 'a'), b: Ember.computed() });\r\n"
  output, _ = run(code, import_wrap_width=20)
  assert output == (
    "import EmberObject, {\r\n  get,\r\n  computed\r\n} from '@ember/object';\r\n"
    "export default EmberObject.extend({ a: get(this, 'a'), b: computed() });\r\n"
  )
