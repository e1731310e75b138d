"""
DATASET CACHE MODULE
====================

Holds at most one reference dataset (an OpenAI file's text, cut to
DATASET_CHAR_LIMIT characters) for the life of the process. Built once at
startup and shared by every request.

  resolve(source_id):
    - None or ""          -> None, nothing fetched.
    - same id as cached   -> cached snippet, nothing fetched.
    - different/no entry  -> fetch, decode UTF-8, truncate, store, return.
    - fetch fails         -> log, return None, keep whatever was cached.

The fetcher is injected so tests can count calls. By default it is
OpenAIFileFetcher, which reads the file through the OpenAI Files API.

CONCURRENCY:
  There is no lock. Two requests that miss at the same time both fetch and the
  last one to finish wins. Each store is a single assignment of a new frozen
  CachedDataset, so a reader sees either the old entry or the new one.
"""

import logging
from typing import Callable, Optional, Union

import httpx
from openai import OpenAI

from config import DATASET_CHAR_LIMIT, get_openai_api_key
from nutritrack.errors import DatasetFetchError
from nutritrack.models import CachedDataset

logger = logging.getLogger("NutriTrack")

# A fetcher takes a file id and returns the raw file content.
Fetcher = Callable[[str], Union[bytes, str]]


class OpenAIFileFetcher:
    """Downloads a file's raw content from OpenAI file storage."""

    def __init__(self, api_key: Optional[str] = None, http_client: Optional[httpx.Client] = None):
        # None means "read OPENAI_API_KEY when fetching", matching how requests are checked.
        self.api_key = api_key
        self.http_client = http_client

    def __call__(self, file_id: str) -> bytes:
        client = OpenAI(
            api_key=self.api_key or get_openai_api_key(),
            max_retries=0,
            http_client=self.http_client,
        )
        response = client.files.content(file_id)
        return response.content


class DatasetCache:
    """Single-slot, process-wide cache for the reference dataset."""

    def __init__(self, fetcher: Optional[Fetcher] = None, char_limit: int = DATASET_CHAR_LIMIT):
        self.fetcher = fetcher or OpenAIFileFetcher()
        self.char_limit = char_limit
        self._entry: Optional[CachedDataset] = None

    @property
    def entry(self) -> Optional[CachedDataset]:
        """The currently cached dataset, if any (read-only view)."""
        return self._entry

    def resolve(self, source_id: Optional[str]) -> Optional[str]:
        """Return the snippet for source_id, fetching it on a miss. None if unavailable."""
        if not source_id:
            return None

        entry = self._entry
        if entry is not None and entry.source_id == source_id:
            logger.debug("Dataset cache hit for %s", source_id)
            return entry.snippet

        logger.info("Dataset cache miss for %s, fetching from OpenAI storage", source_id)
        try:
            text = self._fetch_text(source_id)
        except DatasetFetchError as e:
            # The request goes ahead without reference data.
            logger.error("Failed to load dataset from OpenAI storage: %s", e)
            return None

        snippet = text[: self.char_limit]
        self._entry = CachedDataset(source_id=source_id, snippet=snippet)
        logger.info("Cached dataset %s (%d characters)", source_id, len(snippet))
        return snippet

    def _fetch_text(self, source_id: str) -> str:
        """Fetch and decode the dataset, raising DatasetFetchError on any failure."""
        try:
            raw = self.fetcher(source_id)
            if isinstance(raw, str):
                return raw
            return bytes(raw).decode("utf-8")
        except Exception as e:
            raise DatasetFetchError(source_id, e) from e
