"""Connector related models."""

from enum import Enum

from pydantic import BaseModel, field_validator


class ConnectorType(str, Enum):
    """Supported source-control hosts."""

    GITHUB = "github"
    GITLAB = "gitlab"


class ConnectorRecord(BaseModel):
    """Persisted form of a connector."""

    type: ConnectorType
    id: str
    display: str = ""
    owner: str
    token: str = ""

    @field_validator("token", mode="before")
    @classmethod
    def none_token_is_empty(cls, v: str | None) -> str:
        return v or ""

    @field_validator("owner", "id")
    @classmethod
    def strip_value(cls, v: str) -> str:
        return v.strip()
