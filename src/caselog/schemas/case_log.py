"""Schemas describing recorded case logs and the cases they are attached to."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class CaseLogResponse(BaseModel):
    """Serialized case log row."""

    model_config = ConfigDict(from_attributes=True)

    warning_log_id: int
    operation_type: str
    warning_edit_date: int
    content_type: str
    content_id: int
    content_title: str
    user_id: int
    warning_id: int | None
    warning_date: int
    warning_user_id: int
    warning_definition_id: int | None
    title: str
    notes: str
    points: int
    expiry_date: int
    is_expired: bool
    extra_user_group_ids: str
    reply_ban_thread_id: int
    reply_ban_post_id: int


class CaseNoteResponse(BaseModel):
    """Serialized case note."""

    model_config = ConfigDict(from_attributes=True)

    case_note_id: int
    case_id: int
    user_id: int
    comment_date: int
    message: str
    state_change: str
    is_report: bool
    warning_log_id: int | None


class CaseResponse(BaseModel):
    """Serialized moderation case."""

    model_config = ConfigDict(from_attributes=True)

    case_id: int
    content_type: str
    content_id: int
    content_user_id: int
    content_info: dict[str, Any]
    report_state: str
    assigned_user_id: int
    comment_count: int
    autoreported: bool
