from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel


class Issue(BaseModel):
    number: int
    title: str = ""
    state: Literal["open", "closed"] = "open"
    closed_at: str | None = None
    updated_at: str | None = None
    is_pull_request: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Issue:
        return cls(
            number=data["number"],
            title=data.get("title", ""),
            state=data.get("state", "open"),
            closed_at=data.get("closed_at"),
            updated_at=data.get("updated_at"),
            is_pull_request="pull_request" in data,
        )
