"""
Lift topics into Flow records for downstream deliverable builders.
"""

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..cluster.topics import Topic


@dataclass
class FlowNode:
    msg_ids: List[str] = field(default_factory=list)


@dataclass
class FlowMetrics:
    """Placeholder metrics, filled in by whoever scores the flow."""

    message_count: int = 0
    quality_score: Optional[float] = None


@dataclass
class Flow:
    """One topic wrapped for deliverable attachment.

    ``deliverables`` and ``metrics`` are the only fields expected to
    change after construction.
    """

    id: str
    title: str
    nodes: List[FlowNode] = field(default_factory=list)
    deliverables: List[Any] = field(default_factory=list)
    metrics: FlowMetrics = field(default_factory=FlowMetrics)

    @property
    def msg_ids(self) -> List[str]:
        """Message ids carried by the flow's first node."""
        return list(self.nodes[0].msg_ids) if self.nodes else []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "nodes": [{"msgIds": list(node.msg_ids)} for node in self.nodes],
            "deliverables": list(self.deliverables),
            "metrics": {
                "messageCount": self.metrics.message_count,
                "qualityScore": self.metrics.quality_score,
            },
        }


def new_flow_id() -> str:
    return str(uuid.uuid4())


def build_flows(topics: Sequence[Topic], id_factory: Callable[[], str] = new_flow_id) -> List[Flow]:
    """One Flow per topic, in topic order, each with a fresh identifier."""
    return [
        Flow(
            id=id_factory(),
            title=topic.title,
            nodes=[FlowNode(msg_ids=list(topic.ids))],
            metrics=FlowMetrics(message_count=len(topic.ids)),
        )
        for topic in topics
    ]


def flows_to_json(flows: Sequence[Flow], indent: Optional[int] = 2) -> str:
    return json.dumps([flow.to_dict() for flow in flows], indent=indent, ensure_ascii=False)
