"""
Rewriter Package.

The passes that decide and emit the source edits for one file:
- Context: shared per-file state.
- Expander: candidate member paths of a reference.
- Aliases: destructuring and re-binding of the global.
- Namespaces: member accesses through namespace aliases.
- Replacer: direct usages and the emission of every decision.
- Patcher: byte-range edits applied in one commit.
"""
