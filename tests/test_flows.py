"""
Tests for lifting topics into flows.
"""

import json
import uuid

from flow_harvester.cluster.topics import Topic
from flow_harvester.flows.build import Flow, FlowMetrics, FlowNode, build_flows, flows_to_json


def test_one_flow_per_topic_in_order():
    topics = [Topic("Fix login bug", ["1", "2"]), Topic("Deploy", ["3"]), Topic("Empty", [])]

    flows = build_flows(topics)

    assert [f.title for f in flows] == ["Fix login bug", "Deploy", "Empty"]
    assert [f.msg_ids for f in flows] == [["1", "2"], ["3"], []]
    assert all(len(f.nodes) == 1 for f in flows)
    assert all(f.deliverables == [] for f in flows)


def test_flow_ids_are_fresh_uuids():
    flows = build_flows([Topic("a", ["1"]), Topic("b", ["2"])])

    assert len({f.id for f in flows}) == 2
    for flow in flows:
        uuid.UUID(flow.id)


def test_custom_id_factory():
    counter = iter(range(100))

    flows = build_flows([Topic("a"), Topic("b")], id_factory=lambda: f"flow-{next(counter)}")

    assert [f.id for f in flows] == ["flow-0", "flow-1"]


def test_placeholder_metrics():
    flow = build_flows([Topic("a", ["1", "2", "3"])])[0]

    assert flow.metrics == FlowMetrics(message_count=3, quality_score=None)


def test_flow_does_not_share_topic_list():
    topic = Topic("a", ["1"])
    flow = build_flows([topic])[0]

    topic.ids.append("2")

    assert flow.msg_ids == ["1"]


def test_deliverables_can_be_appended():
    flow = build_flows([Topic("a", ["1"])])[0]

    flow.deliverables.append({"kind": "docs", "path": "README.md"})
    flow.metrics.quality_score = 0.8

    assert flow.to_dict()["deliverables"] == [{"kind": "docs", "path": "README.md"}]
    assert flow.to_dict()["metrics"]["qualityScore"] == 0.8


def test_empty_topics_empty_flows():
    assert build_flows([]) == []
    assert flows_to_json([]) == "[]"


def test_serialization_shape():
    flow = Flow(id="f1", title="Deploy", nodes=[FlowNode(msg_ids=["3"])], metrics=FlowMetrics(message_count=1))

    assert json.loads(flows_to_json([flow])) == [{
        "id": "f1",
        "title": "Deploy",
        "nodes": [{"msgIds": ["3"]}],
        "deliverables": [],
        "metrics": {"messageCount": 1, "qualityScore": None},
    }]


def test_flow_without_nodes_has_no_ids():
    assert Flow(id="f", title="t").msg_ids == []
