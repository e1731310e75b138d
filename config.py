"""
CONFIGURATION MODULE
====================

PURPOSE:
  Central place for all NutriTrack chat settings: the OpenAI credential, the
  optional reference dataset file id, the fixed model parameters, and the
  system prompt texts that frame every conversation.

WHAT THIS FILE DOES:
  - Loads environment variables from .env (so API keys stay out of code).
  - Exposes get_openai_api_key() and get_data_file_id(); both read the
    environment on every call, so a key added to the process environment is
    picked up by the next request.
  - Defines the fixed model id and temperature. These are not request-configurable.
  - Defines the dataset character cap shared by the stored and inline datasets.
  - Holds the persona prompt and the two dataset introduction texts.

USAGE:
  Import what you need: `from config import OPENAI_MODEL, NUTRITRACK_SYSTEM_PROMPT`
  All services import from here so behaviour is consistent.
"""

import os
import logging
from typing import Optional
from dotenv import load_dotenv


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ENVIRONMENT
# -----------------------------------------------------------------------------
# Load environment variables from .env file (if it exists).
# Values already set in the process environment win over .env.
load_dotenv()


# ============================================================================
# OPENAI CONFIGURATION
# ============================================================================
# OPENAI_API_KEY is required; its absence is reported to the caller as a
# configuration error before the request body is even parsed.
# OPENAI_DATA_FILE_ID is optional; when set, the file's content is fetched once
# and sent as reference data with every request.

def get_openai_api_key() -> str:
    """Return the OpenAI API key from the environment, or "" if it is not set."""
    return os.getenv("OPENAI_API_KEY", "").strip()


def get_data_file_id() -> Optional[str]:
    """Return the configured reference dataset file id, or None when unset or blank."""
    file_id = os.getenv("OPENAI_DATA_FILE_ID", "").strip()
    return file_id or None


OPENAI_MODEL = "gpt-4o-mini"
OPENAI_TEMPERATURE = 0.7

# ============================================================================
# DATASET CONFIGURATION
# ============================================================================
# Both the stored reference dataset and the dataset sent inline with a request
# are cut to this many characters (a prefix cut, never sampled).
DATASET_CHAR_LIMIT = 15_000

# The only sender value that produces an assistant turn; anything else is the user.
ASSISTANT_MARKER = "assistant"

# ============================================================================
# SERVER CONFIGURATION
# ============================================================================
SERVER_HOST = os.getenv("NUTRITRACK_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("NUTRITRACK_PORT", "8000"))

# ============================================================================
# NUTRITRACK PERSONA CONFIGURATION
# ============================================================================
# The persona keeps the assistant inside the nutrition/health domain and tells it
# how to redirect off-topic requests. It is always the first turn of a conversation.

ASSISTANT_NAME = (os.getenv("ASSISTANT_NAME", "").strip() or "NutriTrack")

NUTRITRACK_SYSTEM_PROMPT = " ".join([
    f"You are {ASSISTANT_NAME}, a friendly nutrition assistant focused strictly on food, fitness, and wellbeing.",
    "Decline any requests unrelated to nutrition, health, or fitness. Politely redirect the user to ask a health-related question instead.",
    "Offer concise, actionable guidance about meal planning, calorie tracking, macro balance, mindful eating, hydration, and general wellness.",
    "If additional nutrition data is provided, prefer those values when answering, but still keep the response within the nutrition/health domain.",
])

# Introduces the stored reference dataset. The excerpt itself follows after a blank line.
CACHED_DATASET_INTRO = "\n".join([
    "Here is an excerpt from the uploaded nutrition dataset stored in OpenAI files. Use it when answering questions, citing concrete numbers when available.",
    "If the excerpt does not contain relevant information, respond based on general guidance.",
])

# Introduces the dataset the user supplied with this request.
INLINE_DATASET_INTRO = (
    "Here is a recent dataset provided directly by the user in this session. "
    "Prioritize these values if they conflict with other sources."
)
