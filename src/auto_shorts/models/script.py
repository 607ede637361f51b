"""Pydantic models for the five script shapes.

Every model is lenient about *presence* (fields default to empty values) so
that each Narration Unit Provider can report the full set of missing fields
with ``MissingField``; wrong *types* are still rejected at parse time.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from auto_shorts.errors import InvalidScript

VoiceGender = Literal["male", "female"]


class _ScriptBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class TopicScript(_ScriptBase):
    type: Literal["topic"] = "topic"
    title: str = ""
    text: str = ""
    extra: str = ""
    images: list[str] = Field(default_factory=list)


class MessageLine(_ScriptBase):
    voice: VoiceGender = "male"
    message: str
    msgtype: Literal["sender", "receiver"] = "sender"


class MessageScript(_ScriptBase):
    type: Literal["message"] = "message"
    contactname: str = ""
    script: list[MessageLine] = Field(default_factory=list)
    extra: str = ""
    font_name: Optional[str] = Field(default=None, alias="fontName")


class QuizQuestion(_ScriptBase):
    question: str
    answer: str


class QuizScript(_ScriptBase):
    type: Literal["quiz"] = "quiz"
    title: str = ""
    questions: list[QuizQuestion] = Field(default_factory=list)
    start_script: str = ""
    end_script: str = ""
    font_name: Optional[str] = Field(default=None, alias="fontName")


class RankScript(_ScriptBase):
    type: Literal["rank"] = "rank"
    title: str = ""
    rankings: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    start_script: str = ""
    end_script: str = ""


class RatherQuestion(_ScriptBase):
    option1: str
    option2: str
    p1: float = 0
    p2: float = 0
    image1: str = ""
    image2: str = ""


class RatherScript(_ScriptBase):
    type: Literal["rather"] = "rather"
    title: str = ""
    questions: list[RatherQuestion] = Field(default_factory=list)
    start_script: str = ""
    end_script: str = ""
    font_name: Optional[str] = Field(default=None, alias="fontName")


Script = Annotated[
    Union[TopicScript, MessageScript, QuizScript, RankScript, RatherScript],
    Field(discriminator="type"),
]

SCRIPT_MODELS: dict[str, type[_ScriptBase]] = {
    "topic": TopicScript,
    "message": MessageScript,
    "quiz": QuizScript,
    "rank": RankScript,
    "rather": RatherScript,
}


def parse_script(data: Any) -> Script:
    """Validate a raw script document and return the matching variant.

    Raises ``InvalidScript`` for empty input, non-object input, a missing
    ``type`` discriminator, an unknown tag, or mistyped fields.
    """
    if isinstance(data, _ScriptBase):
        return data
    if data is None or data == "":
        raise InvalidScript("Empty JSON data!")
    if not isinstance(data, Mapping):
        raise InvalidScript("Invalid JSON data!")

    script_type = data.get("type")
    if script_type is None:
        raise InvalidScript("Invalid JSON data! Missing 'type' field.")

    model = SCRIPT_MODELS.get(script_type) if isinstance(script_type, str) else None
    if model is None:
        raise InvalidScript(f"Invalid video type: {script_type!r}")

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidScript(f"Invalid {script_type} script: {exc}") from exc
