"""
SERVICES PACKAGE
=================

Business logic lives here. The API layer (nutritrack.main) calls these services;
they don't handle HTTP, only the chat pipeline and OpenAI calls.

MODULES:
    dataset_cache      - Single-slot cache for the reference dataset in OpenAI file storage
    context            - Builds the ordered conversation (persona, datasets, messages)
    completion_service - One OpenAI chat completion per request; empty reply and upstream errors
    chat_service       - Runs a request end to end
"""
