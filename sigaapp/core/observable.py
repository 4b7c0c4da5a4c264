"""
Estado observable para la capa de presentación.

Un StateFlow guarda un valor actual (lectura síncrona con `.value`) y
avisa a sus suscriptores cada vez que cambia. Asignar un valor igual al
actual no notifica.
"""
import logging
from typing import Any, Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Subscriber = Callable[[Any], None]


class StateFlow(Generic[T]):

    def __init__(self, initial: T):
        self._value = initial
        self._subscribers: List[Subscriber] = []

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        if new_value == self._value:
            return
        self._value = new_value
        self._notify()

    def update(self, fn: Callable[[T], T]) -> None:
        self.value = fn(self._value)

    def subscribe(self, callback: Subscriber, emit_current: bool = True) -> Callable[[], None]:
        """
        Registra un suscriptor. Devuelve la función para desuscribirse.
        Con emit_current=True el suscriptor recibe de inmediato el valor actual.
        """
        self._subscribers.append(callback)
        if emit_current:
            callback(self._value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self._value)
            except Exception:
                logger.exception("[StateFlow] Error en suscriptor")


class DerivedStateFlow(StateFlow[R]):
    """StateFlow de solo lectura calculado a partir de otros"""

    def __init__(self, sources: List[StateFlow], transform: Callable[..., R]):
        self._sources = sources
        self._transform = transform
        super().__init__(self._compute())
        self._unsubscribers = [
            source.subscribe(self._on_source_change, emit_current=False)
            for source in sources
        ]

    def _compute(self) -> R:
        return self._transform(*(source.value for source in self._sources))

    def _on_source_change(self, _value: Any) -> None:
        StateFlow.value.fset(self, self._compute())

    @StateFlow.value.setter
    def value(self, new_value: R) -> None:
        raise AttributeError("DerivedStateFlow es de solo lectura")

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []


def combine(first: StateFlow, second: StateFlow, transform: Callable[[Any, Any], R]) -> DerivedStateFlow[R]:
    """Combina dos StateFlow en uno derivado que se recalcula ante cualquier cambio"""
    return DerivedStateFlow([first, second], transform)
