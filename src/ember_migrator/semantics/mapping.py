"""
Member-to-Module Mapping Table.

Loads the global-to-module records from JSON and exposes them keyed by
member path (the dotted path below the global, e.g. ``computed.or``).
The table is read-only once built; the bundled table is loaded at most once
per process.
"""

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from ember_migrator.semantics.paths import default_mappings_path, default_reserved_path
from ember_migrator.semantics.schema import MappingEntry, MappingFile, ReservedFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportSpec:
  """
  Where a member path lives in the modules API.

  Attributes:
      source_module: Module specifier, e.g. ``@ember/object/computed``.
      export_name: Export name, or ``default``.
      preferred_local_name: Local name to use when the export is ``default``
          or when the mapping asks for a rename (``inject as service``).
  """

  source_module: str
  export_name: str
  preferred_local_name: Optional[str] = None


class MappingTable:
  """
  Read-only lookup from member path to :class:`ImportSpec`.
  """

  def __init__(self, specs: Optional[Dict[str, ImportSpec]] = None) -> None:
    self._specs: Dict[str, ImportSpec] = dict(specs or {})
    self._reverse: Dict[Tuple[str, str], str] = {}
    for path, spec in self._specs.items():
      self._reverse.setdefault((spec.source_module, spec.export_name), path)

  @classmethod
  def from_entries(cls, entries: Iterable[MappingEntry], global_name: str = "Ember") -> "MappingTable":
    """
    Builds a table from parsed mapping records.

    The global prefix is stripped from each record's path. Deprecated
    records and records that do not start with the global are skipped.

    Args:
        entries: Parsed records.
        global_name: Name of the global the records are rooted at.

    Returns:
        MappingTable: The populated table.
    """
    prefix = f"{global_name}."
    specs: Dict[str, ImportSpec] = {}
    for entry in entries:
      if entry.deprecated:
        continue
      if not entry.global_path.startswith(prefix):
        logger.debug("Skipping mapping outside the global: %s", entry.global_path)
        continue
      path = entry.global_path[len(prefix) :]
      if path in specs:
        continue
      specs[path] = ImportSpec(entry.module, entry.export, entry.local_name)
    return cls(specs)

  @classmethod
  def load(cls, path: Optional[Path] = None, global_name: str = "Ember") -> "MappingTable":
    """
    Loads a table from a JSON file.

    Args:
        path: Custom mapping file. Defaults to the bundled table.
        global_name: Name of the global the records are rooted at.

    Returns:
        MappingTable: The loaded table.

    Raises:
        ValueError: If the file does not match the mapping schema.
    """
    if path is None:
      return _load_bundled(global_name)
    return _load_file(Path(path), global_name)

  def get(self, path: str) -> Optional[ImportSpec]:
    return self._specs.get(path)

  def __contains__(self, path: object) -> bool:
    return path in self._specs

  def __len__(self) -> int:
    return len(self._specs)

  def __iter__(self) -> Iterator[str]:
    return iter(self._specs)

  def items(self) -> List[Tuple[str, ImportSpec]]:
    return sorted(self._specs.items())

  def find_path(self, source_module: str, export_name: str) -> Optional[str]:
    """
    Reverse lookup: which member path does an existing import correspond to.

    Args:
        source_module: Import source.
        export_name: Imported export name (``default`` for default imports).

    Returns:
        Optional[str]: The member path, or None if the import is unrelated.
    """
    return self._reverse.get((source_module, export_name))

  def local_name_for(self, path: str) -> str:
    """
    Chooses the preferred local name for a new binding of ``path``.

    Uses the name suggested by the table, else the last path segment. The
    reserved-name rule is applied by the module registry.

    Args:
        path: Member path present in the table.

    Returns:
        str: The local identifier.
    """
    spec = self._specs[path]
    return spec.preferred_local_name or path.rsplit(".", 1)[-1]


def _read_entries(path: Path) -> List[MappingEntry]:
  try:
    with open(path, "rt", encoding="utf-8") as f:
      raw = json.load(f)
  except (OSError, json.JSONDecodeError) as e:
    raise ValueError(f"Could not read mapping table {path}: {e}")
  return MappingFile.model_validate(raw).root


@lru_cache(maxsize=None)
def _load_bundled(global_name: str) -> MappingTable:
  table = MappingTable.from_entries(_read_entries(default_mappings_path()), global_name)
  logger.debug("Loaded %d bundled mappings", len(table))
  return table


def _load_file(path: Path, global_name: str) -> MappingTable:
  table = MappingTable.from_entries(_read_entries(path), global_name)
  logger.debug("Loaded %d mappings from %s", len(table), path)
  return table


def load_reserved_names(path: Optional[Path] = None) -> FrozenSet[str]:
  """
  Loads the reserved identifiers list.

  Args:
      path: Custom JSON list. Defaults to the bundled one.

  Returns:
      FrozenSet[str]: Identifiers that must not be used as bare local names.
  """
  target = Path(path) if path else default_reserved_path()
  try:
    with open(target, "rt", encoding="utf-8") as f:
      raw = json.load(f)
  except (OSError, json.JSONDecodeError) as e:
    raise ValueError(f"Could not read reserved names {target}: {e}")
  return frozenset(ReservedFile.model_validate(raw).root)
