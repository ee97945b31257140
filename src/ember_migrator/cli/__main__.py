"""
Main Entry Point for ember-migrator CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `ember_migrator.cli.handlers`.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ember_migrator import __version__
from ember_migrator.cli import handlers
from ember_migrator.enums import NamespacePolicy
from ember_migrator.utils.console import console


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="ember-migrator: Ember globals to module imports")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("-v", "--verbose", action="store_true", help="Show engine debug logging")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: MIGRATE ---
  cmd_mig = subparsers.add_parser("migrate", help="Rewrite an Ember app to use module imports")
  cmd_mig.add_argument("path", type=Path, nargs="?", default=Path("."), help="Project root (default: .)")
  cmd_mig.add_argument(
    "--include",
    nargs="+",
    default=None,
    help="Directories to scan, relative to the project root (default: from toml, else app)",
  )
  cmd_mig.add_argument("--jobs", "-j", type=int, default=1, help="Number of worker processes")
  cmd_mig.add_argument("--dry-run", action="store_true", help="Report changes without writing to disk")
  cmd_mig.add_argument("--report", type=Path, default=None, help="Markdown report destination")
  cmd_mig.add_argument("--force", action="store_true", help="Skip the ember-cli project check")
  cmd_mig.add_argument(
    "--namespace-policy",
    choices=[p.value for p in NamespacePolicy],
    default=None,
    help="Whether destructured namespace aliases keep their own import",
  )

  # --- Command: MAPPINGS ---
  cmd_map = subparsers.add_parser("mappings", help="List the active global-to-module mappings")
  cmd_map.add_argument("--search", default=None, help="Filter by member path or module")

  args = parser.parse_args(argv)

  if args.verbose:
    console.set_level(logging.DEBUG)

  if args.command == "migrate":
    return handlers.handle_migrate(
      args.path,
      include=args.include,
      jobs=args.jobs,
      dry_run=args.dry_run,
      report_path=args.report,
      force=args.force,
      namespace_policy=args.namespace_policy,
    )

  elif args.command == "mappings":
    return handlers.handle_mappings(args.search)

  return 0


if __name__ == "__main__":
  sys.exit(main())
