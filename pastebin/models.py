"""
Pydantic models for request/response validation and the paste record itself.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PREVIEW_LENGTH = 100
ENCRYPTED_PLACEHOLDER = "[Encrypted Content]"
# About a century; keeps now + offset inside the datetime range
MAX_EXPIRES_IN_MS = 100 * 365 * 24 * 60 * 60 * 1000


def summarize_content(content: str, is_encrypted: bool) -> str:
    """Content as shown in previews and listings."""
    if is_encrypted:
        return ENCRYPTED_PLACEHOLDER
    if len(content) > PREVIEW_LENGTH:
        return content[:PREVIEW_LENGTH] + "..."
    return content


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input, serializes as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PasteCreate(CamelModel):
    """Schema for creating a new paste."""
    content: str = Field(..., description="Text content (may be empty)")
    expires_in: Optional[int] = Field(
        None,
        ge=-MAX_EXPIRES_IN_MS,
        le=MAX_EXPIRES_IN_MS,
        description="Lifetime in milliseconds from now (null or 0 = never expires)"
    )
    language: str = Field("plain", description="Syntax highlighting hint")
    burn_after_read: bool = Field(False, description="Delete after the first successful read")
    is_private: bool = Field(False, description="Hint to hide the paste from listings")
    password: Optional[str] = Field(None, description="Encrypt the content under this password")


class PasteSummary(CamelModel):
    """Paste metadata with truncated or placeholder content."""
    id: str
    content: str
    language: str = "plain"
    created_at: datetime
    expires_at: Optional[datetime] = None
    burn_after_read: bool = False
    is_private: bool = False
    is_encrypted: bool = False
    views: int = 0


class Paste(PasteSummary):
    """A full paste record. Content is ciphertext while is_encrypted is set."""
    deleted: bool = Field(False, exclude=True)

    def is_live(self, now: datetime) -> bool:
        """Not deleted and not past its expiry."""
        if self.deleted:
            return False
        return self.expires_at is None or self.expires_at > now

    def to_summary(self) -> PasteSummary:
        data = self.model_dump(exclude={"content"})
        return PasteSummary(
            content=summarize_content(self.content, self.is_encrypted),
            **data,
        )


class PasteResponse(BaseModel):
    """Schema for paste creation response."""
    id: str = Field(..., description="Unique paste ID")
    url: str = Field(..., description="Shareable URL to fetch the paste")


class DeleteResponse(BaseModel):
    """Schema for paste deletion response."""
    message: str = Field(..., description="Confirmation message")


class HealthCheck(BaseModel):
    """Schema for health check response."""
    ok: bool = Field(..., description="Is the application healthy?")
