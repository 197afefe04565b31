"""Notion comment webhooks and the #modify trigger tag."""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

TRIGGER_TAG = "#modify"


def has_trigger(text: str) -> bool:
    return TRIGGER_TAG in (text or "")


def extract_instruction(text: str) -> str:
    """Everything after the first trigger tag, trimmed; "" without a tag."""
    text = text or ""
    index = text.find(TRIGGER_TAG)
    if index == -1:
        return ""
    return text[index + len(TRIGGER_TAG) :].strip()


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class WebhookEntity(_Payload):
    id: str
    type: Literal["comment"]


class WebhookParent(_Payload):
    id: Optional[str] = None
    type: Optional[str] = None


class WebhookData(_Payload):
    page_id: str
    parent: WebhookParent


class CommentWebhook(_Payload):
    type: Literal["comment.created"]
    entity: WebhookEntity
    data: WebhookData

    @property
    def comment_id(self) -> str:
        return self.entity.id

    @property
    def page_id(self) -> str:
        return self.data.page_id

    @property
    def parent_id(self) -> Optional[str]:
        return self.data.parent.id


def parse_comment_webhook(payload: Any) -> Optional[CommentWebhook]:
    """Return the payload as a CommentWebhook, or None for any other delivery."""
    if not isinstance(payload, dict):
        logger.info("Webhook ignored | reason=payload is not an object")
        return None
    try:
        return CommentWebhook.model_validate(payload)
    except PydanticValidationError as e:
        logger.info(
            "Webhook ignored | type=%s errors=%d", payload.get("type"), e.error_count()
        )
        return None


def verification_token(payload: Any) -> Optional[str]:
    """Token Notion sends once when a webhook subscription is created."""
    if isinstance(payload, dict) and isinstance(payload.get("verification_token"), str):
        return payload["verification_token"]
    return None
