"""
Base de los view models: un alcance (scope) de tareas asyncio ligado a
la vida de la pantalla.

Al cerrar el scope se cancelan las tareas en curso y cualquier escritura
de estado posterior se descarta.
"""
import asyncio
import logging
from typing import Any, Coroutine, Optional, Set

from sigaapp.core.exceptions import SigaError
from sigaapp.core.observable import StateFlow

logger = logging.getLogger(__name__)


class ViewModelScope:

    def __init__(self, name: str = "scope"):
        self.name = name
        self.closed = False
        self._tasks: Set[asyncio.Task] = set()

    def launch(self, coro: Coroutine[Any, Any, Any]) -> Optional[asyncio.Task]:
        """Lanza la corrutina como tarea del scope (fire-and-forget)"""
        if self.closed:
            coro.close()
            logger.debug(f"[{self.name}] Scope cerrado, tarea descartada")
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.warning(f"[{self.name}] No hay event loop activo, tarea descartada")
            return None

        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"[{self.name}] Tarea terminó con error", exc_info=exc)

    async def join(self) -> None:
        """Espera a que terminen todas las tareas, incluidas las que se lancen mientras tanto"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        self.closed = True
        for task in list(self._tasks):
            task.cancel()


class ViewModel:

    def __init__(self):
        self.scope = ViewModelScope(type(self).__name__)

    def _emit(self, flow: StateFlow, value: Any) -> None:
        if self.scope.closed:
            return
        flow.value = value

    @staticmethod
    def _error_message(exc: BaseException) -> str:
        if isinstance(exc, SigaError):
            return exc.message
        logger.error("[ViewModel] Error inesperado", exc_info=exc)
        return str(exc) or type(exc).__name__

    def close(self) -> None:
        self.scope.close()
