"""KV em memoria - Backend padrao do QuizStore (dev e testes)."""

import copy
from typing import Any


class MemoryKV:
    """KV assincrono em memoria com a mesma interface do KV do AgentFS.

    Valores sao copiados na escrita e na leitura, entao o chamador nunca
    compartilha referencia com o que esta armazenado.
    """

    def __init__(self):
        self._data: dict[str, Any] = {}

    async def get(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def list(self, prefix: str = "") -> list[dict[str, Any]]:
        return [{"key": key} for key in sorted(self._data) if key.startswith(prefix)]
