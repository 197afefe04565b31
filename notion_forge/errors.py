"""Error taxonomy shared by the HTTP handlers and the background workflows."""

from __future__ import annotations


class NotionForgeError(Exception):
    pass


class ValidationError(NotionForgeError):
    """Missing or malformed request parameters; reported to the caller as 400."""


class ConfigurationError(NotionForgeError):
    def __init__(self, missing: list[str] | str):
        if isinstance(missing, str):
            missing = [missing]
        super().__init__("Missing required configuration: " + ", ".join(missing))
        self.missing = missing


class AuthorizationError(NotionForgeError):
    def __init__(self, page_id: str, database_id: str):
        super().__init__(f"Page {page_id} is not in database {database_id}")
        self.page_id = page_id
        self.database_id = database_id


class GenerationError(NotionForgeError):
    pass


class PersistenceError(NotionForgeError):
    def __init__(self, operation: str, reason: str = "request failed"):
        super().__init__(f"Notion {operation} failed: {reason}")
        self.operation = operation
        self.reason = reason
