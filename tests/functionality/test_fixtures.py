"""
End-to-end migrations of realistic files.

Each fixture under ``tests/fixtures`` is migrated with the bundled mapping
table and checked for the imports it must produce, the usages it must
rewrite and the code it must leave alone.
"""

import pytest

from ember_migrator import MigrationEngine
from ember_migrator.enums import WarningKind


@pytest.fixture(scope="module")
def engine():
  return MigrationEngine()


def test_final_boss(engine, load_fixture):
  result = engine.run(load_fixture("final_boss"), file_path="app/final-boss.js")
  code = result.code

  assert result.success
  assert result.warnings == []

  # Header comment stays on top, new imports go right below it.
  assert code.startswith("//  Test cases:")
  header_end = code.index("//  * Fully modularized destructuring statements are removed\n")
  assert code.index("import { underscore } from '@ember/string';") > header_end

  # Existing imports are extended in their own quote style.
  assert 'import FemberObject, {\n  get as myGet,\n  computed\n} from "@ember/object";' in code
  assert 'import { or as bore, and } from "@ember/object/computed";' in code

  # New imports, in the order their bindings were created.
  new_imports = [
    "import { underscore } from '@ember/string';",
    "import Component from '@ember/component';",
    "import EmberArray from '@ember/array';",
  ]
  positions = [code.index(line) for line in new_imports]
  assert positions == sorted(positions)

  assert "import Ember from 'ember';" not in code
  assert "const Component = Ember.Component;" not in code
  assert "} = Ember;" not in code

  assert "const object1 = FemberObject.extend({" in code
  assert "postCountsPresent: bore('topic.unread', 'topic.displayNewPosts')," in code
  assert "showBadges: and('postBadgesEnabled', 'postCountsPresent')" in code
  assert "topicSlug: computed(function() {" in code
  assert "return underscore(myGet(this, 'topic.name'));" in code
  assert "const object3 = EmberArray.extend({" in code

  # Removed declarations take one of their surrounding blank lines along.
  assert "let bar = foo.Ember.computed.or;\n\nconst object1 = FemberObject.extend({" in code
  assert "\n\n\n" not in code

  # Property lookups and shadowing locals are untouched.
  assert "let bar = foo.Ember.computed.or;" in code
  assert "  let Ember = {};\n  Ember.Component = class Component {" in code


def test_existing_imports_are_reused(engine, load_fixture):
  result = engine.run(load_fixture("existing_imports"), file_path="app/controllers/application.js")
  code = result.code

  assert code.startswith(
    "import { inject as service } from '@ember/service';\n"
    "import { alias } from '@ember/object/computed';\n"
    "import Controller, { inject as controller } from '@ember/controller';\n"
    "import { computed } from '@ember/object';\n"
    "\nexport default Controller.extend({\n"
  )
  assert "controller: controller('application')," in code
  assert "router: service('router')," in code
  assert "anotherRouter: alias('router')," in code
  assert "someComputedProperty: computed(function() { return true; })," in code
  assert "someInvalidMacro: computed.foo('bar')" in code
  # A local `computed` in another function is a different binding.
  assert "foo: computed.not('bar')" in code

  assert [(w.kind, w.subject, w.line) for w in result.warnings] == [
    (WarningKind.MISSING_NAMESPACE_MEMBER, "computed.foo", 13),
  ]


def test_destructured_inject_and_computed(engine, load_fixture):
  result = engine.run(load_fixture("destructure_inject_and_computed"))
  code = result.code

  assert code.startswith(
    "import Controller, { inject as controller } from '@ember/controller';\n"
    "import { inject as service } from '@ember/service';\n"
    "import { alias } from '@ember/object/computed';\n"
    "import { computed } from '@ember/object';\n"
    "\nexport default Controller.extend({\n"
  )
  assert "anotherRouter: alias('router')," in code
  assert "someComputedProperty: computed(function() { return true; })" in code
  assert [(w.kind, w.subject) for w in result.warnings] == [
    (WarningKind.AMBIGUOUS_NAMESPACE_USAGE, "computed"),
  ]


def test_multi_level_destructuring(engine, load_fixture):
  result = engine.run(load_fixture("multi_level_destructuring"))
  code = result.code

  for line in (
    "import { oneWay } from '@ember/object/computed';",
    "import { inject as service } from '@ember/service';",
    "import { camelize } from '@ember/string';",
    "import Component from '@ember/component';",
  ):
    assert line in code

  assert "Ember" not in code
  assert "const {" not in code
  assert "export default Component.extend({" in code
  assert "barService: service('bar')," in code
  assert "name: oneWay('userName')," in code
  assert "\n\n\n" not in code
  assert "';\n\nexport default Component.extend({" in code
  assert result.warnings == []
