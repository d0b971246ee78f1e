"""Quiz Questions - Catalogo de variantes de questao.

Cada variante e um registro com a base comum (id, texto, gabarito, validador
opcional, metadata) mais o payload especifico do seu ``type``. A uniao
``Question`` e discriminada por ``type``; o despacho de validacao acontece no
AnswerValidator, nunca em metodos das variantes.
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from .enums import AnswerType, GraphType, QuestionType
from .schemas import Option, QuestionMetadata
from .values import AnswerValue, LocalizedText


class BaseQuestion(BaseModel):
    """Base comum a todas as variantes."""

    model_config = ConfigDict(frozen=True)

    # Tag do AnswerValue esperado para esta variante
    expected_value_type: ClassVar[str] = "text"

    id: str = Field(..., description="ID unico da questao")
    answer_type: AnswerType = AnswerType.OBJECTIVE
    text: LocalizedText = Field(..., description="Enunciado")
    options: list[Option] | None = None
    correct_answer: AnswerValue | None = Field(default=None, description="Gabarito")
    validator: Any = Field(
        default=None,
        exclude=True,
        description="Validador customizado (objeto com validate() ou callable)",
    )
    metadata: QuestionMetadata = Field(default_factory=QuestionMetadata)

    @property
    def question_type(self) -> QuestionType:
        return QuestionType(self.type)

    @property
    def points(self) -> float:
        return self.metadata.points

    @property
    def is_composite(self) -> bool:
        return False

    @property
    def is_objective(self) -> bool:
        return self.answer_type == AnswerType.OBJECTIVE

    @field_validator("validator")
    @classmethod
    def _check_validator(cls, value: Any) -> Any:
        if value is None or callable(value) or callable(getattr(value, "validate", None)):
            return value
        raise ValueError("validator deve ser callable ou ter metodo validate()")

    @model_validator(mode="after")
    def _check_correct_answer(self):
        if self.is_composite:
            return self

        if self.correct_answer is None:
            if self.is_objective:
                raise ValueError(
                    f"Questao objetiva {self.id} ({self.type}) sem correct_answer"
                )
            return self

        if self.correct_answer.type != self.expected_value_type:
            raise ValueError(
                f"correct_answer da questao {self.id} tem tipo "
                f"'{self.correct_answer.type}', esperado '{self.expected_value_type}'"
            )
        return self


class OptionPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    left: Option
    right: Option


# =============================================================================
# VARIANTES OBJETIVAS
# =============================================================================


class MultipleChoiceQuestion(BaseQuestion):
    type: Literal["MULTI_CHOICE"] = "MULTI_CHOICE"
    options: list[Option] = Field(..., min_length=1)


class DropDownQuestion(BaseQuestion):
    type: Literal["DROPDOWN"] = "DROPDOWN"
    options: list[Option] = Field(..., min_length=1)


class MatchQuestion(BaseQuestion):
    expected_value_type: ClassVar[str] = "array-match"

    type: Literal["MATCHING"] = "MATCHING"
    pairs: list[OptionPair] = Field(default_factory=list)


class ReorderQuestion(BaseQuestion):
    expected_value_type: ClassVar[str] = "array-reorder"

    type: Literal["REORDER"] = "REORDER"
    items: list[Option] = Field(default_factory=list)


class DragAndDropQuestion(BaseQuestion):
    expected_value_type: ClassVar[str] = "array-drag-and-drop"

    type: Literal["DRAG_N_DROP"] = "DRAG_N_DROP"
    items: list[Option] = Field(default_factory=list)
    targets: list[Option] = Field(default_factory=list)


class HotspotQuestion(BaseQuestion):
    expected_value_type: ClassVar[str] = "coordinates"

    type: Literal["IMAGE_HOTSPOT"] = "IMAGE_HOTSPOT"
    image_url: str = ""
    hotspots: list[Option] = Field(default_factory=list)


class LabelingQuestion(BaseQuestion):
    expected_value_type: ClassVar[str] = "array-labeling"

    type: Literal["IMAGE_TAGGING"] = "IMAGE_TAGGING"
    image_url: str = ""
    labels: list[Option] = Field(default_factory=list)


class CategorizeQuestion(BaseQuestion):
    expected_value_type: ClassVar[str] = "array-categorize"

    type: Literal["CLASSIFY"] = "CLASSIFY"
    items: list[Option] = Field(default_factory=list)
    categories: list[Option] = Field(default_factory=list)


class MathResponseQuestion(BaseQuestion):
    type: Literal["MATH_INPUT"] = "MATH_INPUT"
    equation: LocalizedText = ""


class GraphingQuestion(BaseQuestion):
    expected_value_type: ClassVar[str] = "array-graphing"

    type: Literal["GRAPH_PLOTTING"] = "GRAPH_PLOTTING"
    graph_type: GraphType = GraphType.SCATTER
    data_points: list[Option] = Field(default_factory=list)


class PassageQuestion(BaseQuestion):
    """Leitura com sub-questoes.

    O correct_answer proprio e apenas um placeholder: a corretude vem do
    agregado das sub-questoes, que pertencem exclusivamente a passagem.
    """

    expected_value_type: ClassVar[str] = "composite"

    type: Literal["READING_COMPREHENSION"] = "READING_COMPREHENSION"
    passage: LocalizedText = ""
    sub_questions: list[Question] = Field(..., min_length=1)

    @property
    def is_composite(self) -> bool:
        return True


# =============================================================================
# VARIANTES NAO AVALIADAS
# =============================================================================


class FillInTheBlankQuestion(BaseQuestion):
    answer_type: AnswerType = AnswerType.NON_EVALUATED
    type: Literal["FILL_IN_THE_BLANK"] = "FILL_IN_THE_BLANK"


class OpenEndedQuestion(BaseQuestion):
    answer_type: AnswerType = AnswerType.NON_EVALUATED
    type: Literal["OPEN_ENDED"] = "OPEN_ENDED"
    max_length: int = 2000


class DrawQuestion(BaseQuestion):
    expected_value_type: ClassVar[str] = "canvas"

    answer_type: AnswerType = AnswerType.NON_EVALUATED
    type: Literal["DRAW"] = "DRAW"


class VideoResponseQuestion(BaseQuestion):
    expected_value_type: ClassVar[str] = "media"

    answer_type: AnswerType = AnswerType.NON_EVALUATED
    type: Literal["VIDEO_RESPONSE"] = "VIDEO_RESPONSE"
    max_duration: int = 120  # segundos


class AudioResponseQuestion(BaseQuestion):
    expected_value_type: ClassVar[str] = "media"

    answer_type: AnswerType = AnswerType.NON_EVALUATED
    type: Literal["AUDIO_RESPONSE"] = "AUDIO_RESPONSE"
    max_duration: int = 120  # segundos


class SurveyQuestion(BaseQuestion):
    answer_type: AnswerType = AnswerType.NON_EVALUATED
    type: Literal["SURVEY"] = "SURVEY"


class PollQuestion(BaseQuestion):
    answer_type: AnswerType = AnswerType.NON_EVALUATED
    type: Literal["POLL"] = "POLL"
    options: list[Option] = Field(default_factory=list)


class WordCloudQuestion(BaseQuestion):
    expected_value_type: ClassVar[str] = "array-word-cloud"

    answer_type: AnswerType = AnswerType.NON_EVALUATED
    type: Literal["WORD_CLOUD"] = "WORD_CLOUD"
    max_words: int = 3


Question = Annotated[
    Union[
        MultipleChoiceQuestion,
        FillInTheBlankQuestion,
        PassageQuestion,
        MatchQuestion,
        DragAndDropQuestion,
        HotspotQuestion,
        CategorizeQuestion,
        ReorderQuestion,
        DropDownQuestion,
        LabelingQuestion,
        SurveyQuestion,
        MathResponseQuestion,
        GraphingQuestion,
        DrawQuestion,
        OpenEndedQuestion,
        VideoResponseQuestion,
        AudioResponseQuestion,
        PollQuestion,
        WordCloudQuestion,
    ],
    Field(discriminator="type"),
]

PassageQuestion.model_rebuild()

QUESTION_ADAPTER: TypeAdapter[Question] = TypeAdapter(Question)

# QuestionType -> tag do AnswerValue esperado
EXPECTED_VALUE_TYPES: dict[QuestionType, str] = {
    QuestionType(cls.model_fields["type"].default): cls.expected_value_type
    for cls in (
        MultipleChoiceQuestion,
        FillInTheBlankQuestion,
        PassageQuestion,
        MatchQuestion,
        DragAndDropQuestion,
        HotspotQuestion,
        CategorizeQuestion,
        ReorderQuestion,
        DropDownQuestion,
        LabelingQuestion,
        SurveyQuestion,
        MathResponseQuestion,
        GraphingQuestion,
        DrawQuestion,
        OpenEndedQuestion,
        VideoResponseQuestion,
        AudioResponseQuestion,
        PollQuestion,
        WordCloudQuestion,
    )
}


def parse_question(data: Any) -> BaseQuestion:
    """Valida um payload (dict ou modelo) como variante de Question."""
    if isinstance(data, BaseQuestion):
        return data
    return QUESTION_ADAPTER.validate_python(data)
