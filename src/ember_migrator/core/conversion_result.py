"""
Data structures representing the output of the migration pipeline.

This module defines the `MigrationResult` Pydantic model, which encapsulates
the rewritten code and the warnings produced for one file.
"""

from typing import List

from pydantic import BaseModel, Field

from ember_migrator.core.reporter import MigrationWarning


class MigrationResult(BaseModel):
  """
  Container for the results of a single file migration.
  """

  file_path: str = Field(default="", description="Path of the migrated file, if any.")
  code: str = Field(default="", description="The migrated source code (original text on failure).")
  warnings: List[MigrationWarning] = Field(default_factory=list, description="Unresolved usages and errors.")
  success: bool = Field(
    default=True,
    description="False if the transform raised and the original code was kept.",
  )
  changed: bool = Field(default=False, description="True if the code differs from the input.")

  @property
  def has_warnings(self) -> bool:
    """
    Check if the result carries any warning.

    Returns:
        True if one or more warnings are present.
    """
    return len(self.warnings) > 0

  @property
  def errors(self) -> List[MigrationWarning]:
    return [w for w in self.warnings if w.is_error]
