from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.core.utils.domain import normalize_domain
from app.models.enums import VerificationMethodEnum


class VerificationCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    domain: str = Field(min_length=1)
    method: VerificationMethodEnum

    @field_validator("domain")
    @classmethod
    def _normalize_domain(cls, value: str) -> str:
        return normalize_domain(value)


class VerificationOut(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    organization_id: Optional[str] = None
    domain: str
    method: str
    token: str
    status: str
    verified_at: Optional[datetime] = None
    last_checked_at: Optional[datetime] = None
    created_at: datetime


class VerificationInstructions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    method: str
    record_type: Optional[str] = None
    record_name: Optional[str] = None
    file_url: Optional[str] = None
    value: str
    text: str


def serialize_verification(verification) -> dict:
    """JSON-ready camelCase form used for API responses and webhook bodies."""
    return VerificationOut.model_validate(verification).model_dump(mode="json", by_alias=True)
