"""Quiz Storage - Persistencia de snapshots."""

from .quiz_store import KVBackend, QuizStore

__all__ = ["QuizStore", "KVBackend"]
