"""
Enumerations for ember-migrator.

This module defines standard enumerations used across the codebase for
warning categorization and namespace handling policies.
"""

from enum import Enum


class WarningKind(str, Enum):
  """
  Categories of non-fatal (and fatal) findings reported for a single file.

  The string values are the identifiers used in JSON payloads and reports.
  """

  INTERNAL_ERROR = "internal-error"
  MISSING_GLOBAL = "missing-global"
  MISSING_NAMESPACE_MEMBER = "missing-namespace-member"
  UNSUPPORTED_DESTRUCTURING = "unsupported-destructuring"
  AMBIGUOUS_NAMESPACE_USAGE = "ambiguous-namespace-usage"
  SHADOWED_LOCAL_NAME = "shadowed-local-name"


class NamespacePolicy(str, Enum):
  """
  Decides whether a destructured namespace alias (e.g. ``computed``) receives
  its own import binding.
  """

  KEEP_IF_CALLED = "keep_if_called"  # only while something still references it
  ALWAYS_KEEP = "always_keep"


class QuoteStyle(str, Enum):
  """Quote character used for synthesized import sources."""

  SINGLE = "single"
  DOUBLE = "double"

  @property
  def char(self) -> str:
    """The literal quote character."""
    return "'" if self is QuoteStyle.SINGLE else '"'
