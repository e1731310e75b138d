import pytest

from config import CACHED_DATASET_INTRO, INLINE_DATASET_INTRO, NUTRITRACK_SYSTEM_PROMPT
from nutritrack.models import IncomingMessage, Role
from nutritrack.services.context import assemble_conversation, role_for_sender


def _messages(*pairs):
    return [IncomingMessage(sender=s, text=t) for s, t in pairs]


@pytest.mark.parametrize("sender, expected", [
    ("assistant", Role.ASSISTANT),
    ("user", Role.USER),
    (None, Role.USER),
    (1, Role.USER),
    ("Assistant", Role.USER),
    ("assistant ", Role.USER),
    ("system", Role.USER),
    ({"name": "assistant"}, Role.USER),
])
def test_role_for_sender(sender, expected):
    assert role_for_sender(sender) == expected


def test_no_messages_still_has_persona():
    conversation = assemble_conversation(NUTRITRACK_SYSTEM_PROMPT, None, None, [])

    assert len(conversation) == 1
    assert conversation[0].role == Role.SYSTEM
    assert conversation[0].content == NUTRITRACK_SYSTEM_PROMPT


def test_invalid_messages_are_dropped_and_order_kept():
    raw = _messages(
        ("user", "first"),
        ("user", ""),
        ("assistant", "   \n\t"),
        ("user", None),
        ("user", 42),
        (None, ["list"]),
        ("assistant", "second"),
        ("bot", "third"),
    )
    conversation = assemble_conversation("persona", None, None, raw)

    dialogue = conversation[1:]
    assert [t.content for t in dialogue] == ["first", "second", "third"]
    assert [t.role for t in dialogue] == [Role.USER, Role.ASSISTANT, Role.USER]


def test_text_is_sent_untrimmed():
    conversation = assemble_conversation("persona", None, None, _messages(("user", "  hi there \n")))

    assert conversation[1].content == "  hi there \n"


def test_duplicates_are_not_merged():
    raw = _messages(("user", "same"), ("user", "same"))
    conversation = assemble_conversation("persona", None, None, raw)

    assert [t.content for t in conversation[1:]] == ["same", "same"]


def test_both_datasets_give_three_system_turns_in_order():
    raw = _messages(("user", "How much protein is in lentils?"))
    conversation = assemble_conversation("persona", "cached rows", "inline rows", raw)

    assert [t.role for t in conversation] == [Role.SYSTEM, Role.SYSTEM, Role.SYSTEM, Role.USER]
    assert conversation[0].content == "persona"
    assert conversation[1].content == CACHED_DATASET_INTRO + "\n\ncached rows"
    assert conversation[2].content == INLINE_DATASET_INTRO + "\n\ninline rows"


def test_inline_dataset_only():
    conversation = assemble_conversation("persona", None, "inline rows", [])

    assert len(conversation) == 2
    assert conversation[1].content.startswith(INLINE_DATASET_INTRO)
    assert conversation[1].content.endswith("inline rows")


def test_empty_cached_snippet_adds_no_turn():
    conversation = assemble_conversation("persona", "", None, [])

    assert len(conversation) == 1
