"""
Tests for seed extraction.
"""

from flow_harvester.cluster.seeds import Seed, extract_seeds, seed_title
from flow_harvester.core.messages import Message, Role


def _user(i, text):
    return Message(id=str(i), role=Role.USER, text=text)


def test_only_user_messages_in_order():
    messages = [
        _user(1, "Fix login bug"),
        Message(id="2", role=Role.ASSISTANT, text="Here's a fix"),
        Message(id="3", role=Role.TOOL, text="tool output"),
        _user(4, "Deploy to staging"),
    ]

    assert extract_seeds(messages) == [Seed("1", "Fix login bug"), Seed("4", "Deploy to staging")]


def test_title_is_first_line_truncated():
    assert seed_title("first line\nsecond line") == "first line"
    assert seed_title("x" * 200) == "x" * 80
    assert seed_title("windows line\r\nnext") == "windows line"
    assert seed_title("abcdef", max_length=3) == "abc"


def test_empty_titles_skipped_and_not_counted():
    """Blank first lines are dropped before the cap is applied."""
    messages = [_user(0, ""), _user(1, "\nbody only")] + [_user(i, f"topic {i}") for i in range(2, 16)]

    seeds = extract_seeds(messages)

    assert len(seeds) == 12
    assert [s.id for s in seeds] == [str(i) for i in range(2, 14)]


def test_seed_cap_takes_first_in_order():
    messages = [_user(i, f"question {i}") for i in range(20)]

    seeds = extract_seeds(messages, cap=5)

    assert [s.id for s in seeds] == ["0", "1", "2", "3", "4"]


def test_no_messages_no_seeds():
    assert extract_seeds([]) == []
    assert extract_seeds([_user(1, "hi")], cap=0) == []


def test_title_whitespace_kept():
    """Leading whitespace survives and a blank-looking first line is still a title."""
    assert seed_title("  indented question") == "  indented question"
    assert seed_title("   \nbody") == "   "

    seeds = extract_seeds([_user(1, "   \nbody"), _user(2, "")])

    assert seeds == [Seed("1", "   ")]
