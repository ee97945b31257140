"""
Pydantic Schemas for the Mapping Knowledge Base.

This module defines the structure of the JSON files bundled under
``ember_migrator/semantics`` (``ember_mappings.json``, ``reserved.json``).
The mapping file follows the layout of the published ``ember-rfc176-data``
package so user-supplied tables can be dropped in unchanged.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel


class MappingEntry(BaseModel):
  """
  One global-to-module record.

  Example:
      ``{"global": "Ember.computed.or", "module": "@ember/object/computed", "export": "or"}``
  """

  model_config = ConfigDict(populate_by_name=True, extra="ignore")

  global_path: str = Field(alias="global", description="Full dotted global path, e.g. 'Ember.computed.or'.")
  module: str = Field(description="Module specifier the member is exported from.")
  export: str = Field(description="Export name, or 'default'.")
  local_name: Optional[str] = Field(None, alias="localName", description="Preferred local binding name.")
  deprecated: bool = Field(False, description="Deprecated entries are never used for rewriting.")


class MappingFile(RootModel[List[MappingEntry]]):
  """Top-level shape of a mapping JSON file (a plain list of entries)."""


class ReservedFile(RootModel[List[str]]):
  """Top-level shape of the reserved-names JSON file."""
