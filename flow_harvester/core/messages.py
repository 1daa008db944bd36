"""
Message normalization and chat export loading.

A raw message may carry its text under ``text`` or ``content``; the
choice is resolved once here and every later component reads
``Message.text``.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Collection, Dict, Iterable, List, Mapping, Optional, Union

from .errors import MessageFormatError


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        """Map a raw role string onto Role; anything unrecognised is OTHER."""
        if isinstance(value, Role):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.OTHER


@dataclass(frozen=True)
class Message:
    """Normalized chat message."""

    id: str
    role: Role
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "role": self.role.value, "text": self.text}


@dataclass
class Chat:
    """A loaded chat export."""

    messages: List[Message] = field(default_factory=list)
    title: Optional[str] = None


def _content_text(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        # Multi-part content: plain strings or {"text": ...} parts
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, Mapping) and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "\n".join(parts)
    return str(content)


def synthetic_id(position: int, taken: Collection[str] = ()) -> str:
    """``msg-<position>``, suffixed until it differs from every id in ``taken``."""
    candidate = f"msg-{position}"
    suffix = 1
    while candidate in taken:
        candidate = f"msg-{position}-{suffix}"
        suffix += 1
    return candidate


def explicit_id(raw: Any) -> Optional[str]:
    """The id a raw message carries itself, if any."""
    if isinstance(raw, Message):
        return raw.id
    if isinstance(raw, Mapping):
        raw_id = raw.get("id")
        if raw_id is not None and raw_id != "":
            return str(raw_id)
    return None


def normalize_message(raw: Union[Message, Mapping[str, Any]], position: int,
                      taken: Collection[str] = ()) -> Message:
    """
    Normalize one raw message.

    Args:
        raw: A Message or a mapping with ``role`` and ``text``/``content``
        position: Index of the message in its conversation, used for the
            synthetic id of messages that have none
        taken: Ids already in use; a synthetic id never equals one of them

    Returns:
        Normalized Message

    Raises:
        MessageFormatError: If ``raw`` is neither a Message nor a mapping
    """
    if isinstance(raw, Message):
        return raw
    if not isinstance(raw, Mapping):
        raise MessageFormatError(f"Message at position {position} is {type(raw).__name__}, expected an object")

    # ``text`` wins whenever it is present, even if empty
    if raw.get("text") is not None:
        text = _content_text(raw["text"])
    else:
        text = _content_text(raw.get("content"))

    message_id = explicit_id(raw)
    if message_id is None:
        message_id = synthetic_id(position, taken)

    return Message(id=message_id, role=Role.parse(raw.get("role")), text=text)


def normalize_messages(raw_messages: Iterable[Union[Message, Mapping[str, Any]]]) -> List[Message]:
    """Normalize a conversation, preserving message order.

    Supplied ids are collected first so a synthetic id can never merge an
    id-less message with an unrelated one.
    """
    raw_messages = list(raw_messages)
    taken = {i for i in map(explicit_id, raw_messages) if i is not None}

    messages = []
    for position, raw in enumerate(raw_messages):
        message = normalize_message(raw, position, taken)
        taken.add(message.id)
        messages.append(message)
    return messages


def load_chat(path: Union[str, Path]) -> Chat:
    """Load a chat export: a JSON list of messages or an object with ``messages``."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except FileNotFoundError as e:
        raise MessageFormatError(f"Chat export not found: {path}") from e
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MessageFormatError(f"Failed to read chat export {path}: {e}") from e

    title = None
    if isinstance(document, dict):
        title = document.get("title")
        raw_messages = document.get("messages")
    else:
        raw_messages = document

    if not isinstance(raw_messages, list):
        raise MessageFormatError(f"Chat export {path} has no messages list")

    return Chat(messages=normalize_messages(raw_messages), title=title)
