from .migrate import handle_migrate, _migrate_file, _print_batch_summary
from .mappings import handle_mappings

__all__ = [
  "_migrate_file",
  "_print_batch_summary",
  "handle_mappings",
  "handle_migrate",
]
