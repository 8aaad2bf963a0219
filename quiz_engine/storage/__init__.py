"""Quiz Storage - Persistencia em KV."""

from .memory_kv import MemoryKV
from .quiz_store import QuizStore

__all__ = ["MemoryKV", "QuizStore"]
