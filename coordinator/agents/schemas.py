"""Versioned schema for replies returned by remote agent servers.

Agents answer with an ordered list of reply candidates. Two candidate shapes
are understood:

    v1  {"text": "..."}
    v2  {"content": {"text": "..."}}

Anything else is rejected rather than read as an empty reply.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError


class TextReplyV1(BaseModel):
    """Legacy candidate carrying the text at the top level."""

    model_config = ConfigDict(extra="allow")

    text: str


class ReplyContent(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: str


class ContentReplyV2(BaseModel):
    """Candidate carrying the text inside a content object."""

    model_config = ConfigDict(extra="allow")

    content: ReplyContent


ReplyCandidate = ContentReplyV2 | TextReplyV1

_candidates_adapter = TypeAdapter(list[ReplyCandidate])


class ReplyValidationError(ValueError):
    """Raised when a payload matches none of the known reply shapes."""


def extract_reply_text(payload: Any) -> str:
    """Return the text of the first reply candidate.

    An empty candidate list means the agent chose not to answer and yields
    an empty string.
    """
    try:
        candidates = _candidates_adapter.validate_python(payload)
    except ValidationError as e:
        raise ReplyValidationError(
            f"Unexpected agent reply shape: {e.error_count()} validation error(s)"
        ) from e

    if not candidates:
        return ""

    first = candidates[0]
    if isinstance(first, ContentReplyV2):
        return first.content.text
    return first.text
