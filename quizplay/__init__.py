"""quizplay - Engine de progressao de quiz e validacao de respostas.

Arquitetura:
- models/: Enums, Valores tipados, Questoes, Schemas Pydantic, QuizState
- engine/: AnswerValidator, QuizScoringEngine, QuizGame
- loader/: Contrato QuestionLoader e fontes (memoria / paginada)
- storage/: QuizStore (persistencia de snapshots em KV)
- router.py: FastAPI endpoints
"""

from .config import QuizConfig
from .engine import AnswerValidator, QuizGame, QuizScoringEngine, SetOverlapValidator
from .exceptions import QuizError, QuizStateCorruptedError
from .loader import QuestionLoader
from .models import Answer, OperationResult, QuestionType, QuizState, QuizStatus
from .storage import QuizStore

__all__ = [
    # Config
    "QuizConfig",
    # Models
    "QuestionType",
    "QuizStatus",
    "Answer",
    "OperationResult",
    "QuizState",
    # Engines
    "AnswerValidator",
    "SetOverlapValidator",
    "QuizScoringEngine",
    "QuizGame",
    # Loader
    "QuestionLoader",
    # Storage
    "QuizStore",
    # Errors
    "QuizError",
    "QuizStateCorruptedError",
]
