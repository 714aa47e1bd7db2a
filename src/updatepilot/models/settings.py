"""Root structure of the persisted settings blob."""

from typing import Any

from pydantic import BaseModel, Field


class SettingsData(BaseModel):
    """
    Settings file content.

    Entries stay raw dicts at this level so that one malformed record can be
    skipped without rejecting the whole file.
    """

    connectors: list[dict[str, Any]] = Field(default_factory=list)
    plugins: list[dict[str, Any]] = Field(default_factory=list)
    themes: list[dict[str, Any]] = Field(default_factory=list)
