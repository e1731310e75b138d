"""
CONTEXT ASSEMBLY MODULE
=======================

Builds the conversation sent to OpenAI for one request. The order is fixed:

  1. system    - persona (who the assistant is, what it may talk about)
  2. system    - stored reference dataset      (only if present)
  3. system    - dataset sent with this request (only if present)
  4. user/assistant - the client's messages, in the order they were sent

Messages whose text is missing, not a string, or blank are dropped. The
surviving text is sent as-is (untrimmed). Nothing is reordered or merged.
"""

from typing import Any, Iterable, List, Optional

from config import ASSISTANT_MARKER, CACHED_DATASET_INTRO, INLINE_DATASET_INTRO
from nutritrack.models import ChatTurn, IncomingMessage, Role


def role_for_sender(sender: Any) -> Role:
    """
    Map an untrusted sender value to a conversation role.
    Only the literal "assistant" marker is an assistant; everything else,
    including None, numbers and unknown strings, is the user.
    """
    if isinstance(sender, str) and sender == ASSISTANT_MARKER:
        return Role.ASSISTANT
    return Role.USER


def has_text(text: Any) -> bool:
    """True if text is a string with something other than whitespace in it."""
    return isinstance(text, str) and len(text.strip()) > 0


def _dataset_turn(intro: str, snippet: str) -> ChatTurn:
    # Intro, blank line, then the data itself.
    return ChatTurn(role=Role.SYSTEM, content="\n".join([intro, "", snippet]))


def assemble_conversation(
    persona: str,
    cached_snippet: Optional[str],
    inline_snippet: Optional[str],
    raw_messages: Iterable[IncomingMessage],
) -> List[ChatTurn]:
    """Return the ordered turns for one completion call. Always starts with the persona."""
    conversation = [ChatTurn(role=Role.SYSTEM, content=persona)]

    if cached_snippet:
        conversation.append(_dataset_turn(CACHED_DATASET_INTRO, cached_snippet))

    if inline_snippet:
        conversation.append(_dataset_turn(INLINE_DATASET_INTRO, inline_snippet))

    for message in raw_messages:
        if not has_text(message.text):
            continue
        conversation.append(ChatTurn(role=role_for_sender(message.sender), content=message.text))

    return conversation
