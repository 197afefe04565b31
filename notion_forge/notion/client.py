"""Notion I/O helpers: pages, page bodies, comments and file uploads.

Every call to the Notion API goes through `NotionGateway`, which turns
transport and API failures into `PersistenceError`.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Optional

import requests
from notion_client import Client
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from notion_client.helpers import collect_paginated_api

from notion_forge.errors import ConfigurationError, PersistenceError
from notion_forge.notion.markdown import plain_rich_text, rich_text_to_plain
from notion_forge.settings import Settings, get_settings

logger = logging.getLogger(__name__)

NOTION_API_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"
# blocks.children.append accepts at most this many children per call
APPEND_BATCH = 100

_TEXT_BLOCKS = (
    "paragraph",
    "heading_1",
    "heading_2",
    "heading_3",
    "numbered_list_item",
    "bulleted_list_item",
)

_NOTION_ERRORS = (HTTPResponseError, RequestTimeoutError)


def normalize_id(value: Optional[str]) -> str:
    return (value or "").replace("-", "").lower()


def slugify(text: str) -> str:
    out = []
    for ch in str(text).lower():
        out.append(ch if ch.isascii() and ch.isalnum() else "-")
    slug = "".join(out)
    while "--" in slug:
        slug = slug.replace("--", "-")
    return slug.strip("-")


def parent_database_id(page: dict) -> Optional[str]:
    parent = page.get("parent") or {}
    if parent.get("type") in ("database_id", "data_source_id"):
        return parent.get("database_id")
    return None


class NotionGateway:
    def __init__(self, token: str, client: Client | None = None):
        self.token = token
        self.client = client or Client(auth=token, notion_version=NOTION_VERSION)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "NotionGateway":
        settings = settings or get_settings()
        if not settings.NOTION_TOKEN:
            raise ConfigurationError("NOTION_TOKEN")
        return cls(settings.NOTION_TOKEN)

    def _call(self, operation: str, fn, **kwargs):
        try:
            return fn(**kwargs)
        except _NOTION_ERRORS as e:
            raise PersistenceError(operation, str(e)) from e

    # pages

    def query_pages(
        self,
        database_id: str,
        filter: dict | None = None,
        sorts: list[dict] | None = None,
    ) -> list[dict]:
        kwargs: dict[str, Any] = {"database_id": database_id}
        if filter:
            kwargs["filter"] = filter
        if sorts:
            kwargs["sorts"] = sorts
        pages = self._call(
            "query", collect_paginated_api, function=self.client.databases.query, **kwargs
        )
        logger.info("Queried database | database=%s pages=%d", database_id, len(pages))
        return pages

    def create_page(
        self,
        database_id: str,
        properties: dict,
        children: list[dict] | None = None,
        cover: dict | None = None,
    ) -> str:
        children = children or []
        created = self._call(
            "page create",
            self.client.pages.create,
            parent={"database_id": database_id},
            properties=properties,
            children=children[:APPEND_BATCH],
            cover=cover,
        )
        page_id = created["id"]
        self._append(page_id, children[APPEND_BATCH:])
        logger.info("Created page | database=%s page=%s", database_id, page_id)
        return page_id

    def update_page_properties(
        self, page_id: str, properties: dict, cover: dict | None = None
    ) -> None:
        kwargs: dict[str, Any] = {"page_id": page_id, "properties": properties}
        if cover is not None:
            kwargs["cover"] = cover
        self._call("page update", self.client.pages.update, **kwargs)
        logger.info("Updated page properties | page=%s", page_id)

    def fetch_page(self, page_id: str) -> dict:
        return self._call("page retrieve", self.client.pages.retrieve, page_id=page_id)

    def verify_database_access(self, page_id: str, database_id: str) -> Optional[dict]:
        """Return the page if its parent is `database_id`, else None."""
        page = self.fetch_page(page_id)
        if normalize_id(parent_database_id(page)) == normalize_id(database_id):
            return page
        return None

    # page bodies

    def _children(self, block_id: str) -> list[dict]:
        return self._call(
            "block list",
            collect_paginated_api,
            function=self.client.blocks.children.list,
            block_id=block_id,
        )

    def _append(self, block_id: str, children: list[dict]) -> None:
        for i in range(0, len(children), APPEND_BATCH):
            self._call(
                "block append",
                self.client.blocks.children.append,
                block_id=block_id,
                children=children[i : i + APPEND_BATCH],
            )

    def fetch_page_body(self, page_id: str) -> str:
        return "\n".join(block_texts(self._children(page_id)))

    def replace_page_body(self, page_id: str, children: list[dict]) -> None:
        existing = self._children(page_id)
        for block in existing:
            self._call("block delete", self.client.blocks.delete, block_id=block["id"])
        self._append(page_id, children)
        logger.info(
            "Replaced page body | page=%s removed=%d added=%d",
            page_id,
            len(existing),
            len(children),
        )

    # comments

    def create_comment(self, page_id: str, rich_text: list[dict] | str) -> None:
        if isinstance(rich_text, str):
            rich_text = plain_rich_text(rich_text)
        self._call(
            "comment create",
            self.client.comments.create,
            parent={"page_id": page_id},
            rich_text=rich_text,
        )
        logger.info("Posted comment | page=%s", page_id)

    def fetch_comment(self, comment_id: str) -> str:
        comment = self._call(
            "comment retrieve",
            self.client.request,
            path=f"comments/{comment_id}",
            method="GET",
        )
        return rich_text_to_plain(comment.get("rich_text", []))

    # files

    def upload_image(self, data: bytes, title: str) -> str:
        """Upload PNG bytes and return the file upload id for use as a cover."""
        filename = f"{int(time.time() * 1000)}-{slugify(title) or 'image'}.png"
        created = self._call(
            "file upload create",
            self.client.request,
            path="file_uploads",
            method="POST",
            body={"filename": filename, "content_type": "image/png"},
        )
        upload_id = created["id"]
        try:
            resp = requests.post(
                f"{NOTION_API_URL}/file_uploads/{upload_id}/send",
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Notion-Version": NOTION_VERSION,
                },
                files={"file": (filename, data, "image/png")},
                timeout=60,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            raise PersistenceError("file upload send", str(e)) from e
        logger.info("Uploaded image | upload=%s filename=%s", upload_id, filename)
        return upload_id


def file_upload_cover(upload_id: str) -> dict:
    return {"type": "file_upload", "file_upload": {"id": upload_id}}


def mention_comment(message: str, user_id: Optional[str]) -> list[dict]:
    """Rich text for "Hey @user, <message>"; without a user id, just the message."""
    if not user_id:
        return plain_rich_text(message)
    return [
        {"type": "text", "text": {"content": "Hey "}},
        {"type": "mention", "mention": {"type": "user", "user": {"id": user_id}}},
        {"type": "text", "text": {"content": f", {message}"}},
    ]


def block_texts(blocks: Iterable[dict]) -> list[str]:
    """Plain text of each text-bearing block, in order."""
    out = []
    for block in blocks:
        block_type = block.get("type")
        if block_type in _TEXT_BLOCKS:
            out.append(rich_text_to_plain(block[block_type].get("rich_text", [])))
    return out
