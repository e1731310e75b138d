"""
NUTRITRACK APPLICATION PACKAGE
==============================

The chat backend behind the NutriTrack UI:

  from nutritrack.main import app
  from nutritrack.services.chat_service import ChatService

FILE STRUCTURE:
  nutritrack/
    __init__.py   - This file; marks 'nutritrack' as a package.
    main.py       - FastAPI app and HTTP endpoints (/api/chat, /health, /).
    models.py     - Pydantic models for the request body, conversation turns and responses.
    errors.py     - Error classes for every chat failure and the normalizer that maps them to HTTP.
    services/     - Dataset cache, context assembly, OpenAI completion call, request pipeline.
"""
