from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Tag

ContentType = Literal["question", "quiz", "resource"]
RelevanceBand = Literal["high", "mid", "low"]

# Metadata "type" values produced by question banks; everything else is a
# course module/resource hit.
QUESTION_TYPES = frozenset({"question", "quiz"})


class SearchQuery(BaseModel):
    text: str
    content_type: ContentType = "resource"

    model_config = ConfigDict(frozen=True)


class ResourceMetadata(BaseModel):
    type: str
    coursename: str | None = None
    sectionname: str | None = None
    modulename: str | None = None
    moduleprofile: str | None = None
    moduleurl: str | None = None

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)


class QuestionMetadata(BaseModel):
    type: str
    coursename: str | None = None
    sectionname: str | None = None
    questionprofile: str | None = None
    question_preview: str | None = None
    difficulty: str | None = None
    cognitive_skill: str | None = None

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)


def _metadata_kind(value) -> str:
    if isinstance(value, dict):
        kind = value.get("type")
    else:
        kind = getattr(value, "type", None)
    return "question" if isinstance(kind, str) and kind in QUESTION_TYPES else "resource"


ResultMetadata = Annotated[
    Union[
        Annotated[QuestionMetadata, Tag("question")],
        Annotated[ResourceMetadata, Tag("resource")],
    ],
    Discriminator(_metadata_kind),
]


class RawResult(BaseModel):
    """A search hit exactly as the remote endpoint ranked it."""

    id: str
    score: float
    metadata: ResultMetadata

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)


class ResultTag(BaseModel):
    label: str
    emphasis: bool = False

    model_config = ConfigDict(frozen=True)


class DisplayResult(BaseModel):
    id: str
    relevance_percent: int
    title: str
    description: str
    link_url: str
    tags: tuple[ResultTag, ...] = ()

    model_config = ConfigDict(frozen=True)


class ResultCard(DisplayResult):
    relevance_band: RelevanceBand
    relevance_color: str


class SessionView(BaseModel):
    session_id: str
    phase: Literal["idle", "searching", "results"]
    query_text: str
    content_type: ContentType
    is_searching: bool
    has_searched: bool
    status_message: str
    result_count: int
    results: list[ResultCard]


class QueryTextUpdate(BaseModel):
    text: str


class ContentTypeUpdate(BaseModel):
    content_type: ContentType


class SubmitRequest(BaseModel):
    text: str | None = None
    content_type: ContentType | None = None


class KeyPress(BaseModel):
    key: str
