"""User preference model definitions."""
from typing import Optional

from pydantic import BaseModel, Field, computed_field
from pydantic.alias_generators import to_camel


class Preferences(BaseModel):
    """Locally stored preferences."""

    hourly_rate: float = Field(ge=0)
    pantry_id: Optional[str] = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @computed_field
    @property
    def remote_connected(self) -> bool:
        return bool(self.pantry_id)


class RateUpdate(BaseModel):
    """Default hourly rate update request."""

    hourly_rate: float = Field(ge=0)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class RemoteConnect(BaseModel):
    """Remote binding request."""

    pantry_id: str = Field(min_length=1)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
