"""
Core Package.

Contains the migration logic:
- Migration Engine and results
- Syntax adapter (tree-sitter)
- Rewrite passes and the source patcher
- Import synthesis
- Warning reporting
"""
