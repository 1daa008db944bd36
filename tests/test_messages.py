"""
Tests for message normalization and chat export loading.
"""

import json

import pytest

from flow_harvester.core.errors import MessageFormatError
from flow_harvester.core.messages import Message, Role, load_chat, normalize_message, normalize_messages


def test_text_field_preferred_over_content():
    message = normalize_message({"id": "1", "role": "user", "text": "from text", "content": "from content"}, 0)

    assert message == Message(id="1", role=Role.USER, text="from text")


def test_content_used_when_text_missing():
    message = normalize_message({"id": "1", "role": "assistant", "content": "from content"}, 0)

    assert message.text == "from content"


def test_empty_text_still_wins():
    """A present-but-empty text field is not replaced by content."""
    message = normalize_message({"id": "1", "role": "user", "text": "", "content": "ignored"}, 0)

    assert message.text == ""


def test_multipart_content_joined():
    message = normalize_message(
        {"id": "1", "role": "user", "content": ["first part", {"type": "text", "text": "second part"}, {"type": "image"}]},
        0,
    )

    assert message.text == "first part\nsecond part"


def test_missing_text_and_content():
    assert normalize_message({"id": "1", "role": "user"}, 0).text == ""


def test_roles_are_normalized():
    assert Role.parse("USER") is Role.USER
    assert Role.parse("tool") is Role.TOOL
    assert Role.parse("system") is Role.OTHER
    assert Role.parse(None) is Role.OTHER


def test_synthetic_ids_are_positional():
    messages = normalize_messages([
        {"role": "user", "text": "a"},
        {"id": 7, "role": "user", "text": "b"},
        {"id": "", "role": "user", "text": "c"},
    ])

    assert [m.id for m in messages] == ["msg-0", "7", "msg-2"]


def test_synthetic_id_never_shadows_a_supplied_id():
    messages = normalize_messages([
        {"role": "user", "text": "Deploy the payment service"},
        {"id": "msg-0", "role": "assistant", "text": "Unrelated reply about cats"},
        {"id": "msg-0-1", "role": "assistant", "text": "Another reply"},
        {"role": "user", "text": "Roll back the deploy"},
    ])

    assert [m.id for m in messages] == ["msg-0-2", "msg-0", "msg-0-1", "msg-3"]
    assert len({m.id for m in messages}) == len(messages)


def test_synthetic_ids_are_deterministic():
    raw = [{"role": "user", "text": "a"}, {"id": "msg-0", "role": "user", "text": "b"}]

    assert normalize_messages(raw) == normalize_messages(raw)


def test_message_instances_pass_through():
    message = Message(id="x", role=Role.USER, text="hi")

    assert normalize_messages([message]) == [message]


def test_non_mapping_message_rejected():
    with pytest.raises(MessageFormatError):
        normalize_messages(["just a string"])


def test_load_chat_object_form(tmp_path):
    path = tmp_path / "chat.json"
    path.write_text(json.dumps({
        "title": "Support session",
        "messages": [{"id": "1", "role": "user", "text": "Fix login bug"}],
    }))

    chat = load_chat(path)

    assert chat.title == "Support session"
    assert chat.messages == [Message(id="1", role=Role.USER, text="Fix login bug")]


def test_load_chat_list_form(tmp_path):
    path = tmp_path / "chat.json"
    path.write_text(json.dumps([{"id": "1", "role": "user", "content": "hello"}]))

    chat = load_chat(path)

    assert chat.title is None
    assert chat.messages[0].text == "hello"


def test_load_chat_errors(tmp_path):
    with pytest.raises(MessageFormatError):
        load_chat(tmp_path / "missing.json")

    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{")
    with pytest.raises(MessageFormatError):
        load_chat(bad_json)

    no_messages = tmp_path / "no_messages.json"
    no_messages.write_text(json.dumps({"messages": "nope"}))
    with pytest.raises(MessageFormatError):
        load_chat(no_messages)
