"""Pydantic models for crawl requests and extraction results.

All models serialise with the camelCase keys of the JSON contract
(``sourceUrl``, ``titleSelector``, ``plainText`` ...) and accept either
camelCase or snake_case on input.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CrawlRequest(BaseModel):
    """URL to describe plus the selector hints used to extract it.

    Each ``*_selector`` may hold several fallback selectors separated by
    ``|``.  ``cookies`` and ``auth_token`` are forwarded to the fetch step
    untouched and are kept out of ``repr``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str = Field(
        default="",
        validation_alias=AliasChoices("url", "sourceUrl", "source_url"),
    )
    title_selector: str | None = None
    description_selector: str | None = None
    image_selector: str | None = None
    content_selector: str | None = None
    cookies: str | None = Field(default=None, repr=False)
    auth_token: str | None = Field(default=None, repr=False)

    @field_validator("url", mode="before")
    @classmethod
    def strip_url(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip()
        return v


class CrawlData(BaseModel):
    """Structured record extracted from one page.  Immutable once built."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    source_url: str
    title: str | None = None
    description: str | None = None
    image: str | None = None
    content_html: str | None = None
    plain_text: str = ""
    fetched_at: str = ""


class CrawlResponse(BaseModel):
    """Envelope returned to callers: ``{ok, data?, error?}``."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    data: CrawlData | None = None
    error: str | None = None

    @classmethod
    def success(cls, data: CrawlData) -> CrawlResponse:
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str) -> CrawlResponse:
        return cls(ok=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Dump by alias, leaving out whichever of ``data``/``error`` is unset.

        ``CrawlData`` keeps its null fields so every documented key is present.
        """
        out: dict[str, Any] = {"ok": self.ok}
        if self.data is not None:
            out["data"] = self.data.model_dump(by_alias=True)
        if self.error is not None:
            out["error"] = self.error
        return out
