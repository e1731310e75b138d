"""
RUN SCRIPT - Start the NutriTrack chat server
=============================================

PURPOSE:
  Single entry point to start the backend the NutriTrack UI talks to.

WHAT IT DOES:
  - Imports the FastAPI app from nutritrack.main.
  - Runs it with uvicorn on NUTRITRACK_HOST:NUTRITRACK_PORT (default 0.0.0.0:8000).
  - reload=True means any change to Python files will restart the server (handy for development).

USAGE:
  python run.py

  API docs: http://localhost:8000/docs

NOTE:
  Before running, set OPENAI_API_KEY (and optionally OPENAI_DATA_FILE_ID) in .env.
"""

import uvicorn

from config import SERVER_HOST, SERVER_PORT

# ------------------------------------------------------------------------------
# ENTRY POINT
# ------------------------------------------------------------------------------
if __name__ == "__main__":
    uvicorn.run(
        "nutritrack.main:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True
    )
