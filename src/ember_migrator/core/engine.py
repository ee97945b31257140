"""
Orchestration Engine for Module Migration.

This module provides :func:`transform` and the :class:`MigrationEngine`, the
drivers that migrate one JavaScript file from the global (``Ember.computed``)
to per-member module imports.

The pipeline for one file:

1.  **Parsing**: tree-sitter parse; syntax errors abort the file.
2.  **Analysis**: scope pre-pass, scan of existing imports into the module
    registry, location of the tracked global.
3.  **Alias Resolution**: root aliases, destructuring patterns and chained
    aliases; concrete non-namespace aliases are bound first so their local
    names are reused.
4.  **Direct Usages**: ``Ember.a.b`` accesses, longest match first.
5.  **Namespaces**: ``computed.alias`` through namespace aliases.
6.  **Finalization**: manual re-aliasing, pending alias pruning or reporting,
    namespace alias bindings, alias renames, global import removal.
7.  **Emission**: pattern and declarator pruning, import materialization and
    a single commit of every byte-range edit.

Nothing is written to the source until step 7, so a raised transform leaves
no partial mutation behind.
"""

import logging
from typing import FrozenSet, List, Optional, Tuple

from ember_migrator.config import MigrationConfig
from ember_migrator.core.conversion_result import MigrationResult
from ember_migrator.core.errors import TransformError
from ember_migrator.core.reporter import MigrationWarning, internal_error
from ember_migrator.core.rewriter.aliases import AliasResolver
from ember_migrator.core.rewriter.context import RewriteContext
from ember_migrator.core.rewriter.namespaces import NamespaceDisambiguator
from ember_migrator.core.rewriter.replacer import Replacer
from ember_migrator.core.syntax import parse
from ember_migrator.semantics.mapping import MappingTable, load_reserved_names

logger = logging.getLogger(__name__)


def transform(
  source_text: str,
  mapping_table: MappingTable,
  reserved_names: FrozenSet[str],
  config: Optional[MigrationConfig] = None,
  file_path: str = "",
) -> Tuple[str, List[MigrationWarning]]:
  """
  Migrates one file.

  Args:
      source_text: JavaScript source.
      mapping_table: Member-to-module table.
      reserved_names: Identifiers that must not be used as bare local names.
      config: Engine settings; defaults apply when None.
      file_path: Path recorded in warnings.

  Returns:
      Tuple[str, List[MigrationWarning]]: The migrated text and the warnings
      for usages left untouched.

  Raises:
      TransformError: On syntax errors or unmodeled shapes. The error carries
          an ``internal-error`` warning with the stack and original source.
  """
  try:
    return _run(source_text, mapping_table, reserved_names, config or MigrationConfig(), file_path)
  except Exception as e:
    error = e if isinstance(e, TransformError) else TransformError(f"{type(e).__name__}: {e}")
    error.warning = internal_error(e, source_text, file_path)
    if error is e:
      raise
    raise error from e


def _run(
  source_text: str,
  mapping: MappingTable,
  reserved: FrozenSet[str],
  config: MigrationConfig,
  file_path: str,
) -> Tuple[str, List[MigrationWarning]]:
  source = source_text.encode("utf-8")
  tree = parse(source)
  ctx = RewriteContext(tree.root_node, source, mapping, reserved, config, file_path)

  aliases = AliasResolver(ctx)
  replacer = Replacer(ctx)
  namespaces = NamespaceDisambiguator(ctx, aliases)

  aliases.collect()
  aliases.bind_concrete()
  replacer.collect_direct()
  namespaces.run()

  replacer.apply_replacements()
  aliases.finalize()
  aliases.bind_namespaces()
  replacer.rename(aliases.renames())

  if ctx.global_import is not None and not any(ctx.is_live(r) for r in ctx.global_refs()):
    logger.debug("Removing unused import of %s", ctx.global_name)
    ctx.imports.remove_default(ctx.global_import)

  replacer.prune(aliases.destructurings)
  ctx.imports.materialize(ctx.registry)

  output = ctx.patcher.commit().decode("utf-8")
  return output, ctx.collector.warnings


class MigrationEngine:
  """
  Failure-tolerant wrapper around :func:`transform`.

  Loads the mapping table and reserved names once and converts every
  exception into an unsuccessful :class:`MigrationResult` carrying the
  original code.
  """

  def __init__(
    self,
    mapping_table: Optional[MappingTable] = None,
    config: Optional[MigrationConfig] = None,
    reserved_names: Optional[FrozenSet[str]] = None,
  ) -> None:
    """
    Initializes the Engine.

    Args:
        mapping_table: Member-to-module table. Loaded from ``config.mappings_path``
            (or the bundled table) when None.
        config: Engine settings.
        reserved_names: Reserved identifiers. Loaded from ``config.reserved_path``
            (or the bundled list) when None.
    """
    self.config = config or MigrationConfig()
    if mapping_table is None:
      mapping_table = MappingTable.load(self.config.mappings_path)
    self.mapping_table = mapping_table
    if reserved_names is None:
      reserved_names = load_reserved_names(self.config.reserved_path)
    self.reserved_names = reserved_names

  def run(self, code: str, file_path: str = "") -> MigrationResult:
    """
    Executes the migration pipeline.

    Args:
        code: JavaScript source.
        file_path: Path recorded in warnings.

    Returns:
        MigrationResult: Never raises; on failure ``success`` is False and the
        original code is returned with an ``internal-error`` warning.
    """
    try:
      output, warnings = transform(code, self.mapping_table, self.reserved_names, self.config, file_path)
    except TransformError as e:
      logger.debug("Transform failed for %s: %s", file_path or "<string>", e)
      warning = e.warning or internal_error(e, code, file_path)
      return MigrationResult(file_path=file_path, code=code, warnings=[warning], success=False)
    return MigrationResult(file_path=file_path, code=output, warnings=warnings, changed=output != code)
