"""
Projection of raw search hits into renderable result cards.
Pure functions only; nothing here touches the network or session state.
"""
import math

from edusearch.config import settings
from edusearch.schemas.search import (
    DisplayResult,
    QuestionMetadata,
    RawResult,
    RelevanceBand,
    ResultCard,
    ResultTag,
)

UNTITLED = "Resultado sin título"
NO_DESCRIPTION = "No hay descripción disponible."
NO_LINK = "#"

TYPE_LABELS = {
    "question": "Pregunta",
    "quiz": "Cuestionario",
    "url": "Recurso",
    "resource": "Recurso",
    "module": "Recurso",
}

BAND_COLORS: dict[RelevanceBand, str] = {
    "high": "green",
    "mid": "yellow",
    "low": "red",
}


def _first(*values: str | None) -> str | None:
    for value in values:
        if value is not None and value.strip():
            return value
    return None


def relevance_percent(score: float) -> int:
    """Half-up rounding of score * 100, clamped to 0..100."""
    if not math.isfinite(score):
        return 0
    percent = math.floor(score * 100 + 0.5)
    return max(0, min(100, percent))


def relevance_band(
    percent: int,
    high: int | None = None,
    mid: int | None = None,
) -> RelevanceBand:
    high = settings.high_relevance_threshold if high is None else high
    mid = settings.mid_relevance_threshold if mid is None else mid
    if percent >= high:
        return "high"
    if percent >= mid:
        return "mid"
    return "low"


def type_label(kind: str) -> str:
    if kind in TYPE_LABELS:
        return TYPE_LABELS[kind]
    kind = kind.strip()
    return kind.capitalize() if kind else "Contenido"


def _course_title(coursename: str | None) -> str | None:
    if _first(coursename) is None:
        return None
    return f"Pregunta de {coursename}"


def _tags(*pairs: tuple[str, str | None], kind: str) -> tuple[ResultTag, ...]:
    tags = [ResultTag(label=f"{prefix}: {value}") for prefix, value in pairs if _first(value)]
    tags.append(ResultTag(label=type_label(kind), emphasis=True))
    return tuple(tags)


def normalize(raw: RawResult) -> DisplayResult:
    """
    Derive the display fields of a hit. Never fails for a validated RawResult:
    every missing field falls back to placeholder text or a "#" link.
    """
    meta = raw.metadata
    if isinstance(meta, QuestionMetadata):
        title = _course_title(meta.coursename)
        description = _first(meta.questionprofile)
        link_url = _first(meta.question_preview)
        tags = _tags(
            ("Curso", meta.coursename),
            ("Sección", meta.sectionname),
            ("Dificultad", meta.difficulty),
            ("Habilidad", meta.cognitive_skill),
            kind=meta.type,
        )
    else:
        title = _first(meta.modulename, _course_title(meta.coursename))
        description = _first(meta.moduleprofile)
        link_url = _first(meta.moduleurl)
        tags = _tags(
            ("Curso", meta.coursename),
            ("Sección", meta.sectionname),
            kind=meta.type,
        )

    return DisplayResult(
        id=raw.id,
        relevance_percent=relevance_percent(raw.score),
        title=title or UNTITLED,
        description=description or NO_DESCRIPTION,
        link_url=link_url or NO_LINK,
        tags=tags,
    )


def to_card(result: DisplayResult) -> ResultCard:
    band = relevance_band(result.relevance_percent)
    return ResultCard(
        **result.model_dump(),
        relevance_band=band,
        relevance_color=BAND_COLORS[band],
    )
