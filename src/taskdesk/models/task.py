"""Task model - the to-do item managed by the API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

# Editable fields; audit payloads only ever carry these keys
CONTENT_FIELDS = ("title", "description")


class Task(BaseModel):
    """A to-do item with a title, a description and timestamps."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Identity (opaque, store-assigned, immutable)
    id: str

    title: str
    description: str

    # Timestamps
    created_at: datetime
    updated_at: datetime
