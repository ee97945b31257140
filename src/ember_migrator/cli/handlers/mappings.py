"""
Mappings Command Handler.

Prints the active member-to-module table, mainly to check a custom table
configured through ``mappings_path``.
"""

from pathlib import Path
from typing import Optional

from rich.table import Table

from ember_migrator.config import MigrationConfig
from ember_migrator.semantics.mapping import MappingTable
from ember_migrator.utils.console import console, log_error, log_warning


def handle_mappings(search: Optional[str] = None, search_path: Optional[Path] = None) -> int:
  """
  Handles the 'mappings' command execution.

  Args:
      search: Case-insensitive filter on the member path or module.
      search_path: Directory to start looking for pyproject.toml from.

  Returns:
      int: Exit code.
  """
  try:
    config = MigrationConfig.load(search_path=search_path)
    table = MappingTable.load(config.mappings_path)
  except ValueError as e:
    log_error(str(e))
    return 1

  needle = (search or "").lower()
  rows = [
    (path, spec)
    for path, spec in table.items()
    if not needle or needle in path.lower() or needle in spec.source_module.lower()
  ]
  if not rows:
    log_warning(f"No mappings match '{search}'")
    return 0

  view = Table(title=f"{config.global_name} Mappings")
  view.add_column("Global", style="cyan")
  view.add_column("Module", style="green")
  view.add_column("Export")
  view.add_column("Local Name", style="dim")

  for path, spec in rows:
    view.add_row(f"{config.global_name}.{path}", spec.source_module, spec.export_name, table.local_name_for(path))

  console.print(view)
  return 0
