from datetime import datetime
from typing import List

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.crud.webhooks import validate_webhook_events


class WebhookCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: AnyHttpUrl
    events: List[str] = Field(min_length=1)

    @field_validator("events")
    @classmethod
    def _known_events(cls, value: List[str]) -> List[str]:
        return validate_webhook_events(value)


class WebhookOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    organization_id: str
    url: str
    events: List[str]
    is_active: bool
    created_at: datetime
