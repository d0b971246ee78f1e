"""Question Loader - Fronteira de carregamento e fontes de questoes."""

from .base import QuestionLoader
from .sources import InMemoryQuestionSource, PagedQuestionSource, QuestionSource

__all__ = [
    "QuestionLoader",
    "QuestionSource",
    "InMemoryQuestionSource",
    "PagedQuestionSource",
]
