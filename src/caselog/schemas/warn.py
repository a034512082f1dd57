"""Schemas for the moderator's warn form."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

BanLengthUnit = Literal["hours", "days", "weeks", "months", "years"]

BAN_LENGTH_NONE = "none"
BAN_LENGTH_PERMANENT = "permanent"
BAN_LENGTH_TEMPORARY = "temporary"


class WarnSubmitInput(BaseModel):
    """Extra input accepted alongside a warning."""

    resolve_report: bool = False
    ban_length: str | None = Field(default=None, description="'none', 'temporary' or 'permanent'")
    ban_length_value: int | None = Field(default=None, ge=0)
    ban_length_unit: BanLengthUnit | Literal[0] | None = None
    reply_ban_send_alert: bool = False
    reply_ban_reason: str = Field(default="", max_length=100)

    @model_validator(mode="after")
    def _normalize_permanent_ban(self) -> "WarnSubmitInput":
        # A permanent ban has no length.
        if self.ban_length == BAN_LENGTH_PERMANENT:
            self.ban_length_unit = 0
            self.ban_length_value = None
        return self

    @property
    def wants_reply_ban(self) -> bool:
        """Return True if a reply ban was requested."""
        return self.ban_length not in (None, "", BAN_LENGTH_NONE)
