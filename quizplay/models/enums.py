"""Quiz Enums - Tipos de questao, estados e dificuldade."""

from enum import Enum


class QuestionType(str, Enum):
    """Variantes de questao suportadas pelo engine."""

    MULTI_CHOICE = "MULTI_CHOICE"
    FILL_IN_THE_BLANK = "FILL_IN_THE_BLANK"
    READING_COMPREHENSION = "READING_COMPREHENSION"  # Passagem com sub-questoes
    MATCHING = "MATCHING"
    DRAG_N_DROP = "DRAG_N_DROP"
    IMAGE_HOTSPOT = "IMAGE_HOTSPOT"
    CLASSIFY = "CLASSIFY"
    REORDER = "REORDER"
    DROPDOWN = "DROPDOWN"
    IMAGE_TAGGING = "IMAGE_TAGGING"
    SURVEY = "SURVEY"
    MATH_INPUT = "MATH_INPUT"
    GRAPH_PLOTTING = "GRAPH_PLOTTING"
    DRAW = "DRAW"
    OPEN_ENDED = "OPEN_ENDED"
    VIDEO_RESPONSE = "VIDEO_RESPONSE"
    AUDIO_RESPONSE = "AUDIO_RESPONSE"
    POLL = "POLL"
    WORD_CLOUD = "WORD_CLOUD"


class AnswerType(str, Enum):
    """Particao das variantes por corretude computavel."""

    OBJECTIVE = "objective"  # Pontuada pela maquina
    NON_EVALUATED = "non_evaluated"  # Registrada, sem nota automatica


class DifficultyLevel(str, Enum):
    """Niveis de dificuldade das questoes."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GraphType(str, Enum):
    """Tipos de grafico para GRAPH_PLOTTING."""

    LINE = "line"
    BAR = "bar"
    SCATTER = "scatter"


class QuizStatus(str, Enum):
    """Estados do ciclo de vida de uma tentativa."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"  # Terminal


class ErrorCode(str, Enum):
    """Codigos reportados no OperationResult."""

    INVALID_STATE_TRANSITION = "InvalidStateTransition"
    UNKNOWN_QUESTION = "UnknownQuestion"
    ANSWER_TYPE_MISMATCH = "AnswerTypeMismatch"
    NAVIGATION_BOUNDARY = "NavigationBoundary"
    LOADER_FAILURE = "LoaderFailure"
    RECURSION_LIMIT_EXCEEDED = "RecursionLimitExceeded"
    VALIDATOR_FAILURE = "ValidatorFailure"
