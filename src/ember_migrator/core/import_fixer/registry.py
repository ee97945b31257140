"""
Module Registry.

Tracks one :class:`ModuleBinding` per ``(source_module, export_name)`` for the
file being transformed. The registry is preloaded from the import
declarations already in the file; every binding created afterwards is kept in
creation order so synthesized imports come out deterministically.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from ember_migrator.core.import_fixer.models import ImportDeclaration

logger = logging.getLogger(__name__)

BindingKey = Tuple[str, str]


@dataclass(eq=False)
class ModuleBinding:
  """
  A local identifier bound to one export of one module.

  ``declaration`` stays None until the binding is attached to an import
  statement, which happens exactly once.
  """

  source_module: str
  export_name: str
  local_name: str
  declaration: Optional[ImportDeclaration] = None

  @property
  def key(self) -> BindingKey:
    return (self.source_module, self.export_name)

  @property
  def materialized(self) -> bool:
    return self.declaration is not None

  def attach(self, declaration: ImportDeclaration) -> None:
    """
    Ties the binding to its import statement.

    Raises:
        ValueError: If the binding is already materialized.
    """
    if self.declaration is not None:
      raise ValueError(f"Binding {self.local_name} for {self.source_module} is already materialized")
    self.declaration = declaration


class ModuleRegistry:
  """
  Reuse-or-create store of module bindings.
  """

  def __init__(self, reserved: FrozenSet[str] = frozenset(), reserved_prefix: str = "Ember") -> None:
    self.reserved = reserved
    self.reserved_prefix = reserved_prefix
    self._by_key: Dict[BindingKey, ModuleBinding] = {}
    self.bindings: List[ModuleBinding] = []

  @classmethod
  def from_declarations(
    cls,
    declarations: Iterable[ImportDeclaration],
    reserved: FrozenSet[str] = frozenset(),
    reserved_prefix: str = "Ember",
  ) -> "ModuleRegistry":
    """
    Preloads bindings from existing import statements.

    Namespace imports are ignored. When the same export is imported twice,
    the first import wins.
    """
    registry = cls(reserved, reserved_prefix)
    for decl in declarations:
      for export_name, local_name in decl.specifiers():
        key = (decl.source, export_name)
        if key in registry._by_key:
          continue
        binding = ModuleBinding(decl.source, export_name, local_name)
        binding.attach(decl)
        registry._register(binding)
    return registry

  def find_existing(self, source_module: str, export_name: str) -> Optional[ModuleBinding]:
    return self._by_key.get((source_module, export_name))

  def get_or_create(self, source_module: str, export_name: str, preferred_local: str) -> ModuleBinding:
    """
    Returns the binding for an export, creating it when absent.

    Args:
        source_module: Module specifier.
        export_name: Export name or ``default``.
        preferred_local: Local name to use for a new binding; reserved names
            get the reserved prefix.

    Returns:
        ModuleBinding: The existing or new binding.
    """
    existing = self.find_existing(source_module, export_name)
    if existing is not None:
      return existing
    return self.create(source_module, export_name, preferred_local)

  def create(self, source_module: str, export_name: str, preferred_local: str) -> ModuleBinding:
    """
    Creates a new binding.

    Raises:
        ValueError: If a binding for the same export already exists.
    """
    if (source_module, export_name) in self._by_key:
      raise ValueError(f"Duplicate binding for {export_name} from {source_module}")
    local = preferred_local
    if local in self.reserved:
      local = f"{self.reserved_prefix}{local}"
    binding = ModuleBinding(source_module, export_name, local)
    self._register(binding)
    logger.debug("New binding %s <- %s:%s", local, source_module, export_name)
    return binding

  def discard(self, binding: ModuleBinding) -> None:
    """
    Forgets a binding no usage needs anymore.

    Raises:
        ValueError: If the binding is already attached to an import.
    """
    if binding.materialized:
      raise ValueError(f"Binding {binding.local_name} for {binding.source_module} is already materialized")
    del self._by_key[binding.key]
    self.bindings.remove(binding)

  def pending(self) -> List[ModuleBinding]:
    """Bindings not yet attached to an import, in creation order."""
    return [b for b in self.bindings if not b.materialized]

  def _register(self, binding: ModuleBinding) -> None:
    self._by_key[binding.key] = binding
    self.bindings.append(binding)

  def __len__(self) -> int:
    return len(self.bindings)
