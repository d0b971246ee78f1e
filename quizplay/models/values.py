"""Quiz Values - Unioes discriminadas de valores de resposta e de opcao.

Cada valor carrega uma tag ``type`` que o pydantic usa como discriminador.
O validador despacha por essa tag; uma resposta so e comparavel com um
gabarito da mesma tag.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Point(_FrozenModel):
    """Ponto 2D (hotspot, label, grafico)."""

    x: float
    y: float

    def distance_to(self, other: Point) -> float:
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5


# -----------------------------------------------------------------------------
# Pares usados pelas variantes de array
# -----------------------------------------------------------------------------


class DragDropPair(_FrozenModel):
    item_id: str = Field(..., alias="itemId")
    target_id: str = Field(..., alias="targetId")


class CategoryPair(_FrozenModel):
    item_id: str = Field(..., alias="itemId")
    category_id: str = Field(..., alias="categoryId")


class LabelPlacement(_FrozenModel):
    label_id: str = Field(..., alias="labelId")
    position: Point


class MatchPair(_FrozenModel):
    left: str
    right: str


# -----------------------------------------------------------------------------
# AnswerValue
# -----------------------------------------------------------------------------


class TextValue(_FrozenModel):
    type: Literal["text"] = "text"
    value: str


class NumberValue(_FrozenModel):
    type: Literal["number"] = "number"
    value: float


class BooleanValue(_FrozenModel):
    type: Literal["boolean"] = "boolean"
    value: bool


class CoordinatesValue(_FrozenModel):
    type: Literal["coordinates"] = "coordinates"
    value: Point


class CanvasValue(_FrozenModel):
    type: Literal["canvas"] = "canvas"
    value: str  # Desenho serializado (data URL, SVG...)


class MediaValue(_FrozenModel):
    type: Literal["media"] = "media"
    value: str  # Referencia ao arquivo de audio/video


class ReorderValue(_FrozenModel):
    type: Literal["array-reorder"] = "array-reorder"
    value: tuple[Union[str, float], ...]


class DragAndDropValue(_FrozenModel):
    type: Literal["array-drag-and-drop"] = "array-drag-and-drop"
    value: tuple[DragDropPair, ...]


class CategorizeValue(_FrozenModel):
    type: Literal["array-categorize"] = "array-categorize"
    value: tuple[CategoryPair, ...]


class LabelingValue(_FrozenModel):
    type: Literal["array-labeling"] = "array-labeling"
    value: tuple[LabelPlacement, ...]


class MatchValue(_FrozenModel):
    type: Literal["array-match"] = "array-match"
    value: tuple[MatchPair, ...]


class GraphingValue(_FrozenModel):
    type: Literal["array-graphing"] = "array-graphing"
    value: tuple[Point, ...]


class WordCloudValue(_FrozenModel):
    type: Literal["array-word-cloud"] = "array-word-cloud"
    value: tuple[str, ...]


class CompositeValue(_FrozenModel):
    """Resposta de uma passagem: sub_question_id -> valor."""

    type: Literal["composite"] = "composite"
    value: dict[str, AnswerValue]


AnswerValue = Annotated[
    Union[
        TextValue,
        NumberValue,
        BooleanValue,
        CoordinatesValue,
        CanvasValue,
        MediaValue,
        ReorderValue,
        DragAndDropValue,
        CategorizeValue,
        LabelingValue,
        MatchValue,
        GraphingValue,
        WordCloudValue,
        CompositeValue,
    ],
    Field(discriminator="type"),
]

CompositeValue.model_rebuild()

ANSWER_VALUE_ADAPTER: TypeAdapter[AnswerValue] = TypeAdapter(AnswerValue)


# -----------------------------------------------------------------------------
# OptionValue (subconjunto usado apenas dentro de Option)
# -----------------------------------------------------------------------------

OptionValue = Annotated[
    Union[TextValue, NumberValue, CoordinatesValue],
    Field(discriminator="type"),
]

# Texto simples ou mapa idioma -> texto
LocalizedText = Union[str, dict[str, str]]
