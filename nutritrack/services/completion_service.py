"""
COMPLETION SERVICE MODULE
=========================

Sends an assembled conversation to OpenAI chat completions and returns the
reply text. Model and temperature are fixed (config.OPENAI_MODEL,
config.OPENAI_TEMPERATURE); callers cannot change them per request.

FAILURES:
  - Blank or missing reply text -> EmptyReplyError (502), never an empty success.
  - Anything the client raises   -> UpstreamError carrying the status and
                                    message the service returned.
  - One attempt only: the client's own retry loop is switched off.
"""

import logging
from typing import List, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from config import OPENAI_MODEL, OPENAI_TEMPERATURE
from nutritrack.errors import EmptyReplyError, UpstreamError
from nutritrack.models import ChatResponse, ChatTurn, Role

logger = logging.getLogger("NutriTrack")


def build_chat_model(api_key: str) -> ChatOpenAI:
    """Create the OpenAI chat model with the fixed model id and temperature."""
    return ChatOpenAI(
        model=OPENAI_MODEL,
        temperature=OPENAI_TEMPERATURE,
        api_key=api_key,
        max_retries=0,
    )


def to_langchain_messages(conversation: List[ChatTurn]) -> List[BaseMessage]:
    """Convert our role-tagged turns into LangChain message objects, same order."""
    messages: List[BaseMessage] = []
    for turn in conversation:
        if turn.role == Role.SYSTEM:
            messages.append(SystemMessage(content=turn.content))
        elif turn.role == Role.ASSISTANT:
            messages.append(AIMessage(content=turn.content))
        else:
            messages.append(HumanMessage(content=turn.content))
    return messages


class CompletionService:
    """
    Wraps one chat model. Either pass an api_key (a ChatOpenAI model is built
    on first use) or pass a ready chat model (used by tests).
    """

    def __init__(self, api_key: Optional[str] = None, llm: Optional[BaseChatModel] = None):
        self.api_key = api_key or ""
        self.llm = llm

    def invoke(self, conversation: List[ChatTurn]) -> ChatResponse:
        """Send the conversation as-is and return the trimmed first reply."""
        messages = to_langchain_messages(conversation)
        try:
            # Built here so a client construction failure is an UpstreamError too.
            if self.llm is None:
                self.llm = build_chat_model(self.api_key)
            response = self.llm.invoke(messages)
        except Exception as e:
            upstream = UpstreamError.from_exception(e)
            logger.error("OpenAI API error (status %s): %s", upstream.status_code, upstream.message, exc_info=True)
            raise upstream from e

        content = getattr(response, "content", None)
        reply = content.strip() if isinstance(content, str) else ""
        if not reply:
            logger.warning("OpenAI returned an empty reply for a %d-turn conversation", len(conversation))
            raise EmptyReplyError()

        return ChatResponse(reply=reply)
