"""
End-to-end harvesting: normalize, cluster, build flows.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .messages import Message, normalize_messages
from ..cluster.topics import Topic, cluster
from ..flows.build import Flow, build_flows
from ..vector.embeddings import IEmbeddingProvider
from ..vector.index import IVectorStore


@dataclass
class HarvestResult:
    messages: List[Message] = field(default_factory=list)
    topics: List[Topic] = field(default_factory=list)
    flows: List[Flow] = field(default_factory=list)


def harvest(raw_messages: Sequence[Union[Message, Mapping[str, Any]]],
            store: Optional[IVectorStore] = None,
            embedder: Optional[IEmbeddingProvider] = None,
            **overrides) -> HarvestResult:
    """Cluster a conversation and wrap each topic in a Flow.

    ``overrides`` are passed to ``cluster`` (neighbor_k, seed_cap,
    title_max, workers). Errors propagate; nothing partial is returned.
    """
    messages = normalize_messages(raw_messages)
    topics = cluster(messages, store=store, embedder=embedder, **overrides)
    flows = build_flows(topics)
    return HarvestResult(messages=messages, topics=topics, flows=flows)


def flow_messages(result: HarvestResult, flow: Flow) -> List[Message]:
    """Member messages of ``flow`` in membership order.

    With duplicate ids the last message carrying the id is returned,
    matching the index's last-write-wins view.
    """
    by_id: Dict[str, Message] = {m.id: m for m in result.messages}
    return [by_id[msg_id] for msg_id in flow.msg_ids if msg_id in by_id]
