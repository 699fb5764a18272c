import copy
from typing import Any


class SnapshotStore:
    """
    Repositorio in-memory que puede capturar y restaurar su estado.

    InMemoryTransactionManager lo usa para deshacer una unidad de trabajo
    que falló. Las subclases listan sus atributos de estado en _state_attrs.
    """

    _state_attrs: tuple[str, ...] = ()

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy({name: getattr(self, name) for name in self._state_attrs})

    def restore(self, state: dict[str, Any]) -> None:
        for name, value in state.items():
            setattr(self, name, value)
