"""
Seed extraction: short titles taken from user messages.
"""

from dataclasses import dataclass
from typing import List, Sequence

from ..core.messages import Message, Role

DEFAULT_SEED_CAP = 12
DEFAULT_TITLE_MAX = 80


@dataclass(frozen=True)
class Seed:
    """Anchor for one topic: source message id plus a short title."""

    id: str
    title: str


def seed_title(text: str, max_length: int = DEFAULT_TITLE_MAX) -> str:
    """First line of ``text`` truncated to ``max_length``.

    Whitespace is kept as is; only the carriage return of a CRLF line
    ending is dropped. A whitespace-only first line is a valid title.
    """
    return text.split("\n", 1)[0].rstrip("\r")[:max_length]


def extract_seeds(messages: Sequence[Message], cap: int = DEFAULT_SEED_CAP,
                  title_max: int = DEFAULT_TITLE_MAX) -> List[Seed]:
    """Seeds from user messages in original order.

    Messages whose title comes out empty are skipped and do not count
    towards ``cap``.
    """
    seeds: List[Seed] = []
    if cap <= 0:
        return seeds

    for message in messages:
        if message.role is not Role.USER:
            continue
        title = seed_title(message.text, title_max)
        if not title:
            continue
        seeds.append(Seed(id=message.id, title=title))
        if len(seeds) >= cap:
            break

    return seeds
