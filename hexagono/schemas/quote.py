# hexagono/schemas/quote.py
from __future__ import annotations

import re
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from hexagono.domain.quotes import Priority, QuoteStatus, ServiceType
from hexagono.schemas.common import CamelModel, UTCDateTime

PHONE_RE = re.compile(r"^\+?[0-9\s\-\(\)]{8,20}$")

ALLOWED_ATTACHMENT_MIME = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024
MAX_ATTACHMENTS = 5


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


# ---- entrada ----


class AttachmentIn(CamelModel):
    filename: str = Field(..., min_length=1, max_length=255)
    original_name: str = Field(..., min_length=1, max_length=255)
    file_size: int = Field(..., gt=0, le=MAX_ATTACHMENT_BYTES)
    mime_type: str
    storage_url: str = Field(..., min_length=1, max_length=1024)

    @field_validator("mime_type")
    @classmethod
    def validate_mime(cls, v):
        if v not in ALLOWED_ATTACHMENT_MIME:
            raise ValueError("MIME type not allowed")
        return v


class QuoteCreateRequest(CamelModel):
    client_name: str = Field(..., min_length=2, max_length=100)
    client_email: EmailStr
    client_phone: Optional[str] = None
    client_company: Optional[str] = Field(None, max_length=255)

    service_type: ServiceType
    features: List[str] = Field(default_factory=list, max_length=20)
    timeline: Optional[str] = Field(None, max_length=100)
    budget_range: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    additional_requirements: Optional[str] = Field(None, max_length=1000)

    attachments: List[AttachmentIn] = Field(default_factory=list, max_length=MAX_ATTACHMENTS)

    @field_validator("client_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator(
        "client_phone",
        "client_company",
        "timeline",
        "budget_range",
        "description",
        "additional_requirements",
        mode="before",
    )
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator("client_email")
    @classmethod
    def validate_email_length(cls, v):
        if len(v) > 255:
            raise ValueError("Email too long")
        return v

    @field_validator("client_phone")
    @classmethod
    def validate_phone(cls, v):
        if v is not None and not PHONE_RE.match(v):
            raise ValueError("Invalid phone number")
        return v


class StatusUpdateRequest(CamelModel):
    # el estado se valida en el lifecycle (acepta 'quoted' y 'QUOTED')
    status: str
    notes: Optional[str] = Field(None, max_length=1000)
    changed_by: Optional[str] = Field(None, max_length=255)


class QuoteUpdateRequest(CamelModel):
    priority: Optional[Priority] = None
    assigned_to: Optional[str] = Field(None, max_length=255)
    estimated_price: Optional[int] = Field(None, ge=0)


class NoteCreateRequest(CamelModel):
    author: str = Field(..., max_length=255)
    note: str = Field(..., max_length=2000)
    is_internal: bool = True


# ---- salida ----


class QuoteCreatedResponse(CamelModel):
    id: str
    quote_number: str
    access_token: str
    estimated_price: Optional[int]
    status: QuoteStatus
    created_at: UTCDateTime


class StatusUpdateResponse(CamelModel):
    id: str
    status: QuoteStatus
    updated_at: UTCDateTime
    previous_status: QuoteStatus
    changed: bool


class StatusHistoryEntryOut(CamelModel):
    id: int
    previous_status: Optional[QuoteStatus]
    new_status: QuoteStatus
    changed_by: str
    notes: Optional[str]
    created_at: UTCDateTime


class StatusHistoryResponse(CamelModel):
    current_status: QuoteStatus
    status_history: List[StatusHistoryEntryOut]


class FeatureOut(CamelModel):
    name: str
    cost: int


class AttachmentOut(CamelModel):
    id: int
    filename: str
    original_name: str
    file_size: int
    mime_type: str
    storage_url: str
    created_at: UTCDateTime


class NoteOut(CamelModel):
    id: int
    author: str
    note: str
    is_internal: bool
    created_at: UTCDateTime


class QuoteSummaryOut(CamelModel):
    id: str
    quote_number: str
    client_name: str
    client_email: str
    client_company: Optional[str]
    service_type: ServiceType
    estimated_price: Optional[int]
    status: QuoteStatus
    priority: Priority
    assigned_to: Optional[str]
    reminder_count: int
    last_reminder_at: Optional[UTCDateTime]
    created_at: UTCDateTime
    updated_at: UTCDateTime


class QuoteDetailOut(QuoteSummaryOut):
    access_token: str
    client_phone: Optional[str]
    timeline: Optional[str]
    budget_range: Optional[str]
    description: Optional[str]
    additional_requirements: Optional[str]
    features: List[FeatureOut]
    attachments: List[AttachmentOut]
    notes: List[NoteOut]
    status_history: List[StatusHistoryEntryOut]

    @classmethod
    def from_quote(cls, quote) -> "QuoteDetailOut":
        features = [FeatureOut(name=f.feature_name, cost=f.feature_cost) for f in quote.features]
        base = QuoteSummaryOut.model_validate(quote).model_dump()
        return cls(
            **base,
            access_token=quote.access_token,
            client_phone=quote.client_phone,
            timeline=quote.timeline,
            budget_range=quote.budget_range,
            description=quote.description,
            additional_requirements=quote.additional_requirements,
            features=features,
            attachments=[AttachmentOut.model_validate(a) for a in quote.attachments],
            notes=[NoteOut.model_validate(n) for n in quote.notes],
            status_history=[StatusHistoryEntryOut.model_validate(h) for h in quote.status_history],
        )


class QuoteListResponse(CamelModel):
    quotes: List[QuoteSummaryOut]
    total: int
    page: int
    limit: int
    pages: int


class ReminderResponse(CamelModel):
    reminder_sent: bool


class BulkReminderResponse(CamelModel):
    processed: int
    sent: int
    failed: int
