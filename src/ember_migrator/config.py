"""
Runtime Configuration Store.

Holds the settings that shape a migration run: which identifier is the tracked
global, which member paths behave as namespaces, how synthesized imports are
formatted, and where the CLI looks for files. Values come from the
``[tool.ember_migrator]`` table of the nearest ``pyproject.toml`` and are
overridden by CLI arguments.
"""

import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from ember_migrator.enums import NamespacePolicy, QuoteStyle

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

TOOL_SECTION = "ember_migrator"

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")


class MigrationConfig(BaseModel):
  """
  Global configuration container for the migration engine.
  """

  global_name: str = Field("Ember", description="Identifier of the global when no import binds it.")
  global_module: str = Field("ember", description="Module whose default import binds the global.")
  namespaces: List[str] = Field(
    default_factory=lambda: ["computed", "inject"],
    description="Member paths that behave as namespaces (e.g. `computed.alias`).",
  )
  namespace_policy: NamespacePolicy = Field(
    NamespacePolicy.KEEP_IF_CALLED,
    description="Whether a destructured namespace alias keeps its own import.",
  )
  warn_ambiguous_namespaces: bool = Field(
    True, description="Report aliases used both as a namespace and as a callable."
  )
  reserved_prefix: str = Field("Ember", description="Prefix applied to local names that collide with reserved names.")
  quote: QuoteStyle = Field(QuoteStyle.SINGLE, description="Quote style for synthesized import sources.")
  import_wrap_width: int = Field(50, description="Named import lists longer than this wrap one per line.")
  mappings_path: Optional[Path] = Field(None, description="Custom mapping table (JSON) replacing the bundled one.")
  reserved_path: Optional[Path] = Field(None, description="Custom reserved-names list (JSON).")
  include: List[str] = Field(default_factory=lambda: ["app"], description="Directories scanned by the CLI.")
  require_ember_app: bool = Field(True, description="Refuse to run outside an ember-cli project.")

  @field_validator("global_name")
  @classmethod
  def validate_global_name(cls, v: str) -> str:
    """
    Ensures the global name is a plain JavaScript identifier.

    Args:
        v (str): The candidate name.

    Returns:
        str: The stripped name.

    Raises:
        ValueError: If the value contains dots or whitespace.
    """
    v_clean = v.strip()
    if not _IDENTIFIER.match(v_clean):
      raise ValueError(f"Invalid global name: '{v}'")
    return v_clean

  @field_validator("namespaces")
  @classmethod
  def validate_namespaces(cls, v: List[str]) -> List[str]:
    """Drops blanks and duplicates while keeping declaration order."""
    return list(dict.fromkeys(ns.strip() for ns in v if ns.strip()))

  @field_validator("import_wrap_width")
  @classmethod
  def validate_wrap_width(cls, v: int) -> int:
    if v < 1:
      raise ValueError("import_wrap_width must be positive")
    return v

  @classmethod
  def load(
    cls,
    namespace_policy: Optional[str] = None,
    include: Optional[List[str]] = None,
    mappings_path: Optional[Path] = None,
    require_ember_app: Optional[bool] = None,
    search_path: Optional[Path] = None,
  ) -> "MigrationConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Relative paths found in the TOML file are resolved against the directory
    the file was found in.

    Args:
        namespace_policy (Optional[str]): Override for the namespace policy.
        include (Optional[List[str]]): Override for scanned directories.
        mappings_path (Optional[Path]): Override for the mapping table file.
        require_ember_app (Optional[bool]): Override for project detection.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        MigrationConfig: The fully resolved configuration object.

    Raises:
        ValueError: If the merged settings fail validation.
    """
    start_dir = search_path or Path.cwd()
    toml_config, toml_dir = _load_toml_settings(start_dir)

    merged: Dict[str, Any] = dict(toml_config)

    for key in ("mappings_path", "reserved_path"):
      if merged.get(key) and toml_dir:
        merged[key] = (toml_dir / Path(merged[key])).resolve()

    if namespace_policy is not None:
      merged["namespace_policy"] = namespace_policy
    if include:
      merged["include"] = include
    if mappings_path is not None:
      merged["mappings_path"] = mappings_path
    if require_ember_app is not None:
      merged["require_ember_app"] = require_ember_app

    try:
      return cls(**merged)
    except ValueError as e:
      raise ValueError(f"Invalid configuration: {e}")


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory definition was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get(TOOL_SECTION, {}), parent

  return {}, None
