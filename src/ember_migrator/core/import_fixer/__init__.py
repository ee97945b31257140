"""
Import Fixer Package.

This package provides the ``ImportSynthesizer`` class, responsible for:
1.  **Scanning**: Reading the import statements already in a file.
2.  **Pruning**: Removing the tracked global's import once it is unused.
3.  **Injection**: Attaching new bindings to existing or new import statements.

It is composed of several mixins handling specific concerns.
"""

from ember_migrator.core.import_fixer.base import BaseImportSynthesizer
from ember_migrator.core.import_fixer.imports_mixin import ImportsMixin
from ember_migrator.core.import_fixer.injection_mixin import InjectionMixin
from ember_migrator.core.import_fixer.models import ImportDeclaration
from ember_migrator.core.import_fixer.registry import ModuleBinding, ModuleRegistry


class ImportSynthesizer(ImportsMixin, InjectionMixin, BaseImportSynthesizer):
  """
  Composite import manager.

  Inherits functionality from:
  - :class:`ImportsMixin`: reading and rewriting existing statements.
  - :class:`InjectionMixin`: materializing bindings into statements.
  - :class:`BaseImportSynthesizer`: state and configuration.
  """


__all__ = ["ImportDeclaration", "ImportSynthesizer", "ModuleBinding", "ModuleRegistry"]
