"""
Markdown Report Renderer.

Turns the warnings of a batch run into a Markdown document listing everything
that needs manual follow-up. Internal errors show the stack trace and the
original source; every other finding shows the dotted global path, the file,
the line and the surrounding code.
"""

from pathlib import Path
from typing import Iterable, List

from ember_migrator.core.conversion_result import MigrationResult
from ember_migrator.core.reporter import MigrationWarning
from ember_migrator.enums import WarningKind

DEFAULT_REPORT_NAME = "MODULE_REPORT.md"

_HEADINGS = {
  WarningKind.MISSING_GLOBAL: "Unknown Global",
  WarningKind.MISSING_NAMESPACE_MEMBER: "Unknown Namespace Member",
  WarningKind.UNSUPPORTED_DESTRUCTURING: "Unsupported Destructuring",
  WarningKind.AMBIGUOUS_NAMESPACE_USAGE: "Ambiguous Namespace Usage",
  WarningKind.SHADOWED_LOCAL_NAME: "Shadowed Local Name",
}

_EXPLANATIONS = {
  WarningKind.MISSING_GLOBAL: "No module export is known for this global; the usage was left untouched.",
  WarningKind.MISSING_NAMESPACE_MEMBER: "The namespace has no known member with this name; the usage was left untouched.",
  WarningKind.UNSUPPORTED_DESTRUCTURING: "This destructuring shape is not migrated automatically.",
  WarningKind.AMBIGUOUS_NAMESPACE_USAGE: "The alias is used both as a namespace and as a function; check the resulting imports.",
  WarningKind.SHADOWED_LOCAL_NAME: "A local variable hides the name the import would use; the usage was left untouched.",
}


def global_path(warning: MigrationWarning, global_name: str = "Ember") -> str:
  """Renders the subject as a dotted global path (``Ember.computed.foo``)."""
  if not warning.subject:
    return global_name
  return f"{global_name}.{warning.subject}"


def _render_error(warning: MigrationWarning) -> List[str]:
  return [
    "### Unknown Error",
    "",
    f"**File**: `{warning.file_path}`",
    "",
    "While migrating this file, the following exception occurred:",
    "",
    "```",
    (warning.stack or warning.subject).rstrip(),
    "```",
    "",
    "**Source**:",
    "",
    "```js",
    (warning.source or "").rstrip(),
    "```",
    "",
  ]


def _render_warning(warning: MigrationWarning, global_name: str) -> List[str]:
  return [
    f"### {_HEADINGS[warning.kind]}",
    "",
    f"**Global**: `{global_path(warning, global_name)}`",
    "",
    f"**Location**: `{warning.file_path}` at line {warning.line}",
    "",
    _EXPLANATIONS[warning.kind],
    "",
    "```js",
    warning.context.rstrip(),
    "```",
    "",
  ]


def render_report(results: Iterable[MigrationResult], global_name: str = "Ember") -> str:
  """
  Renders every warning of a run.

  Args:
      results: Per-file results.
      global_name: Name used to display member paths.

  Returns:
      str: The Markdown document.
  """
  lines: List[str] = ["## Module Report", ""]
  for result in results:
    for warning in result.warnings:
      if warning.is_error:
        lines.extend(_render_error(warning))
      else:
        lines.extend(_render_warning(warning, global_name))
  return "\n".join(lines).rstrip() + "\n"


def write_report(results: Iterable[MigrationResult], path: Path, global_name: str = "Ember") -> Path:
  path.write_text(render_report(results, global_name), encoding="utf-8")
  return path
