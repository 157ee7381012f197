"""API request/response models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from podcast_trends.durations import MaxDurationOption


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TtsRequest(_CamelModel):
    """Narration request for one episode of the current snapshot."""

    episode_id: str | None = None
    max_duration: str | None = None


class TtsResponse(_CamelModel):
    """Successful narration result."""

    success: bool = True
    audio_url: str
    script: str
    estimated_duration_seconds: int
    episode_id: str
    category_id: str


class DurationOptionResponse(_CamelModel):
    value: MaxDurationOption
    label: str
    seconds: int | None = None


class MessageResponse(BaseModel):
    """Error body returned for 4xx/5xx responses."""

    message: str
