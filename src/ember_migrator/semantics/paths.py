"""
Path Resolution Utilities for Semantics.

Handles locating the bundled JSON tables within the package or source tree.
"""

from importlib.resources import files
from pathlib import Path

MAPPINGS_FILENAME = "ember_mappings.json"
RESERVED_FILENAME = "reserved.json"


def resolve_semantics_dir() -> Path:
  """
  Locates the directory containing the bundled mapping definitions.

  Prioritizes the local file system (relative to this file) to ensure
  tests and editable installs find the source of truth correctly.
  Falls back to package resources for installed distributions.

  Returns:
      Path: The absolute path to the 'semantics' directory.
  """
  local_path = Path(__file__).parent
  if (local_path / MAPPINGS_FILENAME).exists():
    return local_path

  try:
    resource_path = Path(str(files("ember_migrator.semantics")))
  except (ModuleNotFoundError, TypeError):
    return local_path
  if (resource_path / MAPPINGS_FILENAME).exists():
    return resource_path

  # Fallback to local path; the loader reports the missing file.
  return local_path


def default_mappings_path() -> Path:
  """Returns the bundled mapping table path."""
  return resolve_semantics_dir() / MAPPINGS_FILENAME


def default_reserved_path() -> Path:
  """Returns the bundled reserved-names list path."""
  return resolve_semantics_dir() / RESERVED_FILENAME
