"""Quiz Models - Enums, Valores, Questoes, Schemas e State."""

from .enums import AnswerType, DifficultyLevel, ErrorCode, GraphType, QuestionType, QuizStatus
from .questions import (
    EXPECTED_VALUE_TYPES,
    AudioResponseQuestion,
    BaseQuestion,
    CategorizeQuestion,
    DragAndDropQuestion,
    DrawQuestion,
    DropDownQuestion,
    FillInTheBlankQuestion,
    GraphingQuestion,
    HotspotQuestion,
    LabelingQuestion,
    MatchQuestion,
    MathResponseQuestion,
    MultipleChoiceQuestion,
    OpenEndedQuestion,
    OptionPair,
    PassageQuestion,
    PollQuestion,
    Question,
    ReorderQuestion,
    SurveyQuestion,
    VideoResponseQuestion,
    WordCloudQuestion,
    parse_question,
)
from .schemas import Answer, OperationResult, Option, QuestionMetadata, ValidationOutcome
from .state import QuizState
from .values import (
    AnswerValue,
    BooleanValue,
    CanvasValue,
    CategorizeValue,
    CategoryPair,
    CompositeValue,
    CoordinatesValue,
    DragAndDropValue,
    DragDropPair,
    GraphingValue,
    LabelingValue,
    LabelPlacement,
    LocalizedText,
    MatchPair,
    MatchValue,
    MediaValue,
    NumberValue,
    OptionValue,
    Point,
    ReorderValue,
    TextValue,
    WordCloudValue,
)

__all__ = [
    # Enums
    "QuestionType",
    "AnswerType",
    "DifficultyLevel",
    "GraphType",
    "QuizStatus",
    "ErrorCode",
    # Values
    "AnswerValue",
    "OptionValue",
    "LocalizedText",
    "Point",
    "TextValue",
    "NumberValue",
    "BooleanValue",
    "CoordinatesValue",
    "CanvasValue",
    "MediaValue",
    "ReorderValue",
    "DragAndDropValue",
    "DragDropPair",
    "CategorizeValue",
    "CategoryPair",
    "LabelingValue",
    "LabelPlacement",
    "MatchValue",
    "MatchPair",
    "GraphingValue",
    "WordCloudValue",
    "CompositeValue",
    # Schemas
    "Option",
    "QuestionMetadata",
    "Answer",
    "ValidationOutcome",
    "OperationResult",
    # Questions
    "Question",
    "BaseQuestion",
    "OptionPair",
    "MultipleChoiceQuestion",
    "FillInTheBlankQuestion",
    "PassageQuestion",
    "MatchQuestion",
    "DragAndDropQuestion",
    "HotspotQuestion",
    "CategorizeQuestion",
    "ReorderQuestion",
    "DropDownQuestion",
    "LabelingQuestion",
    "SurveyQuestion",
    "MathResponseQuestion",
    "GraphingQuestion",
    "DrawQuestion",
    "OpenEndedQuestion",
    "VideoResponseQuestion",
    "AudioResponseQuestion",
    "PollQuestion",
    "WordCloudQuestion",
    "EXPECTED_VALUE_TYPES",
    "parse_question",
    # State
    "QuizState",
]
