"""
Migrate Command Handler.

This module implements the logic for the `ember-migrator migrate` command.
It orchestrates:
1. Configuration loading (pyproject.toml + CLI overrides).
2. Ember project detection via ``package.json``.
3. Discovery of the JavaScript files to migrate.
4. Per-file transformation, optionally fanned out to worker processes.
5. Write-back, summary table and the Markdown report.
"""

import json
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional

from rich.table import Table

from ember_migrator.config import MigrationConfig
from ember_migrator.core.conversion_result import MigrationResult
from ember_migrator.core.engine import MigrationEngine
from ember_migrator.core.reporter import internal_error
from ember_migrator.utils.console import (
  console,
  log_error,
  log_info,
  log_success,
  log_warning,
)
from ember_migrator.utils.report import DEFAULT_REPORT_NAME, write_report

NOT_AN_EMBER_APP = "It doesn't look like you're inside an Ember app."


def handle_migrate(
  project_path: Path,
  include: Optional[List[str]] = None,
  jobs: int = 1,
  dry_run: bool = False,
  report_path: Optional[Path] = None,
  force: bool = False,
  namespace_policy: Optional[str] = None,
) -> int:
  """
  Handles the 'migrate' command execution.

  Args:
      project_path: Root of the Ember project.
      include: Directories (relative to the root) to scan. Defaults to the
          configured ``include`` list.
      jobs: Number of worker processes. 1 runs in-process.
      dry_run: If True, nothing is written back.
      report_path: Destination of the Markdown report. Defaults to
          ``MODULE_REPORT.md`` in the project root.
      force: Skip the ember-cli project check.
      namespace_policy: Override for the namespace policy.

  Returns:
      int: Exit code (0 unless an internal error occurred).
  """
  if not project_path.is_dir():
    log_error(f"Project directory not found: {project_path}")
    return 1

  try:
    config = MigrationConfig.load(
      namespace_policy=namespace_policy,
      include=include,
      require_ember_app=False if force else None,
      search_path=project_path,
    )
  except ValueError as e:
    log_error(str(e))
    return 1

  if config.require_ember_app and not is_ember_project(project_path):
    log_error(NOT_AN_EMBER_APP)
    return 1

  files = discover_files(project_path, config.include)
  if not files:
    log_warning(f"No .js files found under {', '.join(config.include)}")
    return 0

  log_info(f"Migrating {len(files)} files in [path]{project_path}[/path]...")
  results = _run_batch(files, project_path, config, jobs)

  written = 0
  for path, result in zip(files, results):
    if not result.success or not result.changed:
      continue
    if dry_run:
      log_info(f"Would rewrite [path]{result.file_path}[/path]")
      continue
    with open(path, "wt", encoding="utf-8", newline="") as f:
      f.write(result.code)
    written += 1

  if not dry_run:
    log_info(f"Rewrote {written} file(s).")

  _print_batch_summary({r.file_path: r for r in results})

  if any(r.has_warnings for r in results):
    target = report_path or project_path / DEFAULT_REPORT_NAME
    write_report(results, target, config.global_name)
    log_warning(f"Some files need manual follow-up. See [path]{target}[/path]")
  else:
    log_success("Migration complete. No manual follow-up needed.")

  return 1 if any(r.errors for r in results) else 0


def is_ember_project(project_path: Path) -> bool:
  """
  Checks whether ``package.json`` lists ember-cli as a (dev) dependency.

  Args:
      project_path: Directory holding ``package.json``.

  Returns:
      bool: True for an ember-cli project.
  """
  manifest = project_path / "package.json"
  if not manifest.is_file():
    return False
  try:
    with open(manifest, "rt", encoding="utf-8") as f:
      data = json.load(f)
  except (OSError, json.JSONDecodeError):
    return False
  if not isinstance(data, dict):
    return False
  for section in ("dependencies", "devDependencies"):
    deps = data.get(section) or {}
    if isinstance(deps, dict) and "ember-cli" in deps:
      return True
  return False


def discover_files(project_path: Path, include: List[str]) -> List[Path]:
  """Collects every ``*.js`` file under the include directories, sorted."""
  found = set()
  for directory in include:
    root = project_path / directory
    if not root.is_dir():
      continue
    found.update(p for p in root.rglob("*.js") if p.is_file())
  return sorted(found)


def _run_batch(files: List[Path], project_path: Path, config: MigrationConfig, jobs: int) -> List[MigrationResult]:
  labels = [_label(path, project_path) for path in files]
  if jobs <= 1:
    return [_migrate_file(path, label, config) for path, label in zip(files, labels)]

  with ProcessPoolExecutor(max_workers=jobs) as pool:
    return list(pool.map(_migrate_file, files, labels, [config] * len(files)))


def _label(path: Path, project_path: Path) -> str:
  try:
    return str(path.relative_to(project_path))
  except ValueError:
    return str(path)


def _migrate_file(path: Path, label: str, config: MigrationConfig) -> MigrationResult:
  """
  Migrates a single file. Runs inside worker processes.

  Args:
      path: File to read.
      label: Path recorded in warnings and the summary.
      config: Engine settings.

  Returns:
      MigrationResult: The outcome; read failures become internal errors.
  """
  try:
    with open(path, "rt", encoding="utf-8", newline="") as f:
      code = f.read()
  except (OSError, UnicodeDecodeError) as e:
    return MigrationResult(file_path=label, warnings=[internal_error(e, "", label)], success=False)

  engine = MigrationEngine(config=config)
  return engine.run(code, file_path=label)


def _print_batch_summary(results: Dict[str, MigrationResult]) -> None:
  """
  Renders a summary table of migration results to the console.

  Args:
      results: Dictionary mapping file labels to migration results.
  """
  total = len(results)
  clean = sum(1 for r in results.values() if r.success and not r.has_warnings)
  flagged = total - clean

  if flagged == 0:
    log_success(f"Batch Complete: {clean}/{total} files migrated cleanly.")
    return

  table = Table(title="Migration Report")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Issues", style="red")

  for filename, res in results.items():
    if res.success and not res.has_warnings:
      continue
    status = "❌ Failed" if not res.success else "⚠️ Warnings"
    issues = "; ".join(f"{w.kind.value}: {w.subject}" for w in res.warnings)
    table.add_row(filename, status, issues)

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {clean} Clean, {flagged} with Issues.")
