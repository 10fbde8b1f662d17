"""Pydantic schemas for news items and the public JSON API.

The browser UI speaks camelCase, so every model serializes with camelCase
aliases while Python code keeps snake_case attribute names.
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TimeRange = Literal["none", "day", "week", "month", "year"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CredibilityMetadata(CamelModel):
    """Per-signal credibility scores, each in [0, 1]."""

    source_reputation: float = Field(0.5, ge=0.0, le=1.0)
    domain_trust: float = Field(0.5, ge=0.0, le=1.0)
    content_quality: float = Field(0.5, ge=0.0, le=1.0)
    ai_confidence: float = Field(0.5, ge=0.0, le=1.0)


class NewsItem(CamelModel):
    """A single news article as served to the UI."""

    title: str = Field(..., description="Headline, translated when a language was requested.")
    summary: str = Field("", description="Short summary of the article.")
    content: str = Field("", description="Article text shown in the card body.")
    source: str = Field("Unknown", description="Outlet name or hostname.")
    published_at: str = Field(..., description="ISO-8601 publication timestamp.")
    category: str = Field("Other", description="One of the fixed news categories.")
    url: str | None = Field(None, description="Link to the original article.")
    raw_content: str | None = Field(
        None,
        exclude=True,
        description="Full article markdown from search; classifier input only.",
    )
    credibility_score: float | None = Field(None, ge=0.0, le=1.0)
    credibility_metadata: CredibilityMetadata | None = None


class NewsQuery(CamelModel):
    """Parsed query string of ``GET /api/news``."""

    category: str | None = None
    time_range: TimeRange = "week"
    limit: int = 10
    language: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class NewsListResponse(CamelModel):
    success: bool = True
    data: list[NewsItem]
    count: int
    timestamp: str


class SummarizeRequest(CamelModel):
    news_item: NewsItem


class SummaryPayload(CamelModel):
    original_summary: str
    ai_summary: str


class SummarizeResponse(CamelModel):
    success: bool = True
    data: SummaryPayload
    timestamp: str


class ChatRequest(CamelModel):
    message: str = Field(..., min_length=1)
    news_context: list[NewsItem] = Field(default_factory=list)


class ChatResponse(CamelModel):
    success: bool = True
    data: str
    timestamp: str
