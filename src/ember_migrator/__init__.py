"""
ember-migrator Package.

A codemod that migrates Ember applications from the ``Ember`` global
(``Ember.computed.alias``) to per-member module imports
(``import { alias } from '@ember/object/computed'``).

This package exposes the migration engine and configuration utilities for
programmatic usage.

Usage
-----

Simple String Migration
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import ember_migrator as em
    code = "import Ember from 'ember';\\nexport default Ember.Component.extend({});\\n"
    print(em.migrate(code))
    # import Component from '@ember/component';
    # export default Component.extend({});

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from ember_migrator import MigrationEngine, MigrationConfig

    engine = MigrationEngine(config=MigrationConfig(quote="double"))
    res = engine.run(code, file_path="app/components/x-foo.js")

    for warning in res.warnings:
        print(warning.kind.value, warning.subject, warning.line)
"""

from typing import Optional

from ember_migrator.config import MigrationConfig
from ember_migrator.core.conversion_result import MigrationResult
from ember_migrator.core.engine import MigrationEngine, transform
from ember_migrator.core.errors import TransformError
from ember_migrator.semantics.mapping import MappingTable

__version__ = "0.0.1"


def migrate(code: str, config: Optional[MigrationConfig] = None) -> str:
  """
  Migrates a string of JavaScript code to module imports.

  Convenience wrapper around :class:`MigrationEngine`. Warnings are dropped;
  use the engine directly to inspect them.

  Args:
      code (str): The source code to migrate.
      config (MigrationConfig, optional): Engine settings.

  Returns:
      str: The migrated source code.

  Raises:
      ValueError: If the migration fails (e.g. syntax errors).
  """
  result = MigrationEngine(config=config).run(code)
  if not result.success:
    error_msg = "\n".join(w.subject for w in result.errors)
    raise ValueError(f"Migration failed:\n{error_msg}")
  return result.code


__all__ = [
  "MappingTable",
  "MigrationConfig",
  "MigrationEngine",
  "MigrationResult",
  "TransformError",
  "migrate",
  "transform",
  "__version__",
]
