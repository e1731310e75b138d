"""
CHAT SERVICE MODULE
===================

Runs one POST /api/chat request from raw body bytes to reply text:

  1. check OPENAI_API_KEY            (ConfigurationError, before anything else)
  2. parse the JSON body             (PayloadError)
  3. resolve the reference dataset   (DatasetCache; failures only mean "no dataset")
  4. assemble the conversation       (persona, datasets, client messages)
  5. call OpenAI                     (EmptyReplyError / UpstreamError)

The service keeps no conversation state: the client sends its whole
transcript every time. The only state shared across requests is the dataset
cache passed in at construction.
"""

import json
import logging
from typing import Any, Callable, List, Optional

from config import DATASET_CHAR_LIMIT, NUTRITRACK_SYSTEM_PROMPT, get_data_file_id, get_openai_api_key
from nutritrack.errors import ConfigurationError, PayloadError
from nutritrack.models import ChatPayload, ChatResponse, IncomingMessage
from nutritrack.services.completion_service import CompletionService
from nutritrack.services.context import assemble_conversation
from nutritrack.services.dataset_cache import DatasetCache

logger = logging.getLogger("NutriTrack")

# Builds a CompletionService for a given API key.
CompletionFactory = Callable[[str], CompletionService]


# ------------------------------------------------------------------------------
# REQUEST PARSING
# ------------------------------------------------------------------------------

def _coerce_message(raw: Any) -> IncomingMessage:
    # Anything that is not an object has neither sender nor text.
    if not isinstance(raw, dict):
        return IncomingMessage()
    return IncomingMessage(sender=raw.get("sender"), text=raw.get("text"))


def _inline_dataset(raw: Any) -> Optional[str]:
    if not isinstance(raw, str) or not raw.strip():
        return None
    return raw[:DATASET_CHAR_LIMIT]


def parse_payload(body: bytes) -> ChatPayload:
    """
    Parse the request body. Only a body that is not a JSON object is an error;
    a missing or malformed messages list is read as no messages, and a missing,
    blank or non-string dataset as no dataset.
    """
    try:
        data = json.loads(body)
    except (ValueError, TypeError, RecursionError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors;
        # RecursionError comes from bodies nested too deeply to parse
        logger.warning("Rejected chat request with invalid JSON: %s", e)
        raise PayloadError() from e

    if not isinstance(data, dict):
        logger.warning("Rejected chat request: body is %s, not an object", type(data).__name__)
        raise PayloadError()

    raw_messages = data.get("messages")
    messages: List[IncomingMessage] = []
    if isinstance(raw_messages, list):
        messages = [_coerce_message(m) for m in raw_messages]

    return ChatPayload(messages=messages, dataset=_inline_dataset(data.get("dataset")))


# ------------------------------------------------------------------------------
# CHAT SERVICE CLASS
# ------------------------------------------------------------------------------

class ChatService:
    """Ties the dataset cache, context assembly and completion call together."""

    def __init__(self, dataset_cache: DatasetCache, completion_factory: Optional[CompletionFactory] = None):
        self.dataset_cache = dataset_cache
        self.completion_factory = completion_factory or (lambda api_key: CompletionService(api_key=api_key))

    def process_request(self, body: bytes) -> ChatResponse:
        """Handle one raw request body. Raises a NutriTrackError subclass on failure."""
        api_key = get_openai_api_key()
        if not api_key:
            logger.error("OPENAI_API_KEY is not set; refusing chat request")
            raise ConfigurationError()

        payload = parse_payload(body)
        cached_snippet = self.dataset_cache.resolve(get_data_file_id())

        conversation = assemble_conversation(
            NUTRITRACK_SYSTEM_PROMPT,
            cached_snippet,
            payload.dataset,
            payload.messages,
        )
        logger.info(
            "Chat request: %d incoming messages -> %d turns (reference dataset: %s, inline dataset: %s)",
            len(payload.messages),
            len(conversation),
            "yes" if cached_snippet else "no",
            "yes" if payload.dataset else "no",
        )

        return self.completion_factory(api_key).invoke(conversation)
