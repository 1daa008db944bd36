"""
End-to-end tests for harvest().
"""

import pytest

from flow_harvester.core.errors import EmbeddingError
from flow_harvester.core.messages import Role
from flow_harvester.core.pipeline import flow_messages, harvest
from flow_harvester.vector.embeddings import HashedTokenEmbedding
from flow_harvester.vector.index import SimpleInMemoryVectorStore

CHAT = [
    {"id": "1", "role": "user", "text": "Fix login bug"},
    {"id": "2", "role": "assistant", "content": "Here's a fix"},
    {"id": "3", "role": "user", "text": "Fix login bug again"},
    {"role": "tool", "text": "ran tests"},
]


def _structure(result):
    return [(flow.title, flow.msg_ids) for flow in result.flows]


def test_harvest_builds_flows_from_topics():
    result = harvest(CHAT, store=SimpleInMemoryVectorStore(), embedder=HashedTokenEmbedding())

    assert len(result.messages) == 4
    assert result.messages[3].id == "msg-3"
    assert len(result.flows) == len(result.topics) == 2
    assert [f.msg_ids for f in result.flows] == [t.ids for t in result.topics]


def test_repeat_runs_have_identical_structure():
    """Fresh stores give identical title and membership, only flow ids differ."""
    first = harvest(CHAT, store=SimpleInMemoryVectorStore(), embedder=HashedTokenEmbedding())
    second = harvest(CHAT, store=SimpleInMemoryVectorStore(), embedder=HashedTokenEmbedding())

    assert _structure(first) == _structure(second)
    assert [f.id for f in first.flows] != [f.id for f in second.flows]


def test_flow_messages_in_membership_order():
    result = harvest(CHAT, store=SimpleInMemoryVectorStore(), embedder=HashedTokenEmbedding())

    members = flow_messages(result, result.flows[0])

    assert [m.id for m in members] == result.flows[0].msg_ids
    assert all(m.role is not Role.TOOL for m in members)


def test_overrides_reach_cluster():
    result = harvest(CHAT, store=SimpleInMemoryVectorStore(), embedder=HashedTokenEmbedding(), seed_cap=1)

    assert [f.title for f in result.flows] == ["Fix login bug"]


def test_failure_returns_nothing_partial():
    class Broken(HashedTokenEmbedding):
        def embed_text(self, text):
            if text == "Fix login bug again":
                raise UnicodeError("bad text")
            return super().embed_text(text)

    with pytest.raises(EmbeddingError):
        harvest(CHAT, store=SimpleInMemoryVectorStore(), embedder=Broken())
