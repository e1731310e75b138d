"""
NUTRITRACK CHAT CLIENT
======================

PURPOSE:
A command-line client for the NutriTrack chat API. The server keeps no
conversation state, so this client keeps the transcript itself and sends all
of it with every message, the same way the web UI does.

USAGE:
    python client.py [--url http://localhost:8000]

    Make sure the server is running first: python run.py

COMMANDS:
    /dataset PATH - Attach a text file (e.g. a CSV export) as the inline dataset
    /nodataset    - Stop sending the inline dataset
    /history      - Show the local transcript
    /clear        - Start a new conversation
    /quit or /exit - Exit
"""

import argparse
from pathlib import Path

import requests

from config import ASSISTANT_NAME, DATASET_CHAR_LIMIT


# -----------------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------------
DEFAULT_URL = "http://localhost:8000"
TIMEOUT_SECONDS = 60


# -----------------------------------------------------------------------------
# CHAT SESSION
# -----------------------------------------------------------------------------

class ChatSession:
    """Local transcript plus the optional inline dataset for one conversation."""

    def __init__(self, base_url: str = DEFAULT_URL):
        self.base_url = base_url.rstrip("/")
        self.messages = []
        self.dataset = None
        self.dataset_name = None

    def attach_dataset(self, path: str) -> str:
        """Read a text file and send it as the inline dataset from now on."""
        text = Path(path).read_text(encoding="utf-8", errors="replace")
        self.dataset = text[:DATASET_CHAR_LIMIT]
        self.dataset_name = Path(path).name
        note = " (truncated)" if len(text) > DATASET_CHAR_LIMIT else ""
        return f"📎 Attached {self.dataset_name}: {len(self.dataset)} characters{note}"

    def detach_dataset(self):
        self.dataset = None
        self.dataset_name = None

    def clear(self):
        self.messages = []

    def build_payload(self, text: str) -> dict:
        payload = {"messages": self.messages + [{"sender": "user", "text": text}]}
        if self.dataset:
            payload["dataset"] = self.dataset
        return payload

    def send(self, text: str) -> str:
        """
        Send the transcript plus the new message. On success both the message
        and the reply are added to the transcript; on failure neither is, so
        the user can retry.
        """
        try:
            response = requests.post(
                f"{self.base_url}/api/chat",
                json=self.build_payload(text),
                timeout=TIMEOUT_SECONDS,
            )
        except requests.exceptions.ConnectionError:
            return "❌ Cannot connect to backend. Start it with: python run.py"
        except requests.exceptions.Timeout:
            return "❌ Request timed out. Try again."

        try:
            data = response.json()
        except ValueError:
            return f"❌ Error: {response.status_code} - {response.text}"

        # A proxy or error page may answer with JSON that is not an object.
        if not isinstance(data, dict):
            return f"❌ Error: {response.status_code} - {response.text}"

        if response.status_code == 200 and isinstance(data.get("reply"), str):
            self.messages.append({"sender": "user", "text": text})
            self.messages.append({"sender": "assistant", "text": data["reply"]})
            return data["reply"]

        if isinstance(data.get("error"), str):
            return f"❌ {data['error']} ({response.status_code})"
        return f"❌ Error: {response.status_code} - {response.text}"

    def format_history(self) -> str:
        if not self.messages:
            return "No messages in this conversation"
        output = f"\n📜 Chat History ({len(self.messages)} messages):\n"
        output += "-" * 60 + "\n"
        for i, msg in enumerate(self.messages, 1):
            role = ASSISTANT_NAME if msg["sender"] == "assistant" else "You"
            output += f"{i}. {role}: {msg['text']}\n"
        output += "-" * 60 + "\n"
        return output


# -----------------------------------------------------------------------------
# MAIN LOOP
# -----------------------------------------------------------------------------

def print_header():
    print("\n" + "=" * 60)
    print(f"🥗 {ASSISTANT_NAME} - Nutrition Chat")
    print("=" * 60)
    print("\nCommands:")
    print("  /dataset PATH - Attach a dataset file")
    print("  /nodataset - Detach the dataset")
    print("  /history - See chat history")
    print("  /clear - Start new conversation")
    print("  /quit - Exit")
    print("=" * 60 + "\n")


def main():
    parser = argparse.ArgumentParser(description="Terminal client for the NutriTrack chat API")
    parser.add_argument("--url", default=DEFAULT_URL, help="Base URL of the chat server")
    args = parser.parse_args()

    session = ChatSession(args.url)
    print_header()

    while True:
        try:
            user_input = input("\nYou: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        if user_input in ["/quit", "/exit"]:
            print("\n👋 Goodbye!")
            break
        elif user_input == "/history":
            print(session.format_history())
            continue
        elif user_input == "/clear":
            session.clear()
            print("\n🔄 Conversation cleared. Starting fresh!")
            continue
        elif user_input == "/nodataset":
            session.detach_dataset()
            print("Dataset detached.")
            continue
        elif user_input.startswith("/dataset"):
            path = user_input[len("/dataset"):].strip()
            if not path:
                print("❌ Usage: /dataset PATH")
                continue
            try:
                print(session.attach_dataset(path))
            except OSError as e:
                print(f"❌ Could not read {path}: {e}")
            continue
        elif user_input.startswith("/"):
            print(f"❌ Unknown command: {user_input}")
            continue

        print(f"🤖 {ASSISTANT_NAME}: ", end="", flush=True)
        print(session.send(user_input))


if __name__ == "__main__":
    main()
