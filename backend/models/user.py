from datetime import datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class CurrentUser(BaseModel):
    """
    The signed-in user as written to `userData` by the auth flow.

    Only the fields attribution needs are modelled; everything else the
    auth flow stores is ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "_id", "userId"))
    email: Optional[str] = None
    name: Optional[str] = None
    last_login: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("last_login", "lastLogin")
    )

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        return value

    @field_validator("last_login")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def normalized_email(self) -> str:
        return (self.email or "").strip().lower()
