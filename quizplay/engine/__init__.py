"""Quiz Engines - Validacao, pontuacao e ciclo de vida."""

from .quiz_game import QuizGame
from .scoring_engine import Evaluation, QuizScoringEngine
from .validator import AnswerValidator, SetOverlapValidator

__all__ = [
    "AnswerValidator",
    "SetOverlapValidator",
    "QuizScoringEngine",
    "Evaluation",
    "QuizGame",
]
