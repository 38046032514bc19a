"""Shared data types passed across provider boundaries."""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

# Equality filter over payload keys. Empty or None matches everything.
SearchFilters = dict[str, Any]


@dataclass
class VectorStoreResult:
    """A record returned by a vector store.

    Attributes:
        id: Record identifier, unique within its collection.
        payload: Metadata stored alongside the vector.
        score: Similarity to the query. Only set by ``search``.
    """
    id: str
    payload: dict[str, Any] = field(default_factory=dict)
    score: Optional[float] = None

    def __repr__(self) -> str:
        if self.score is None:
            return f"VectorStoreResult(id={self.id})"
        return f"VectorStoreResult(id={self.id}, score={self.score:.3f})"


@dataclass
class HistoryRecord:
    """One row of the memory mutation log."""
    id: int
    memory_id: str
    previous_value: Optional[str]
    new_value: Optional[str]
    action: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_deleted: int = 0

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "HistoryRecord":
        """Build a record from a database row keyed by column name."""
        return cls(
            id=row["id"],
            memory_id=row["memory_id"],
            previous_value=row.get("previous_value"),
            new_value=row.get("new_value"),
            action=row["action"],
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            is_deleted=int(row.get("is_deleted") or 0),
        )


@dataclass
class Message:
    """A chat message sent to an LLM provider."""
    role: str
    content: Any

    def content_text(self) -> str:
        if isinstance(self.content, str):
            return self.content
        return json.dumps(self.content)


@dataclass
class ToolCall:
    name: str
    arguments: str


@dataclass
class LLMResponse:
    """Standardized chat completion response."""
    content: str
    role: str = "assistant"
    tool_calls: list[ToolCall] = field(default_factory=list)
