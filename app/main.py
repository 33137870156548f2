"""ASGI entry point.

Run with ``uvicorn main:server_app --host 0.0.0.0 --port 8000`` from the
``app`` directory.
"""

from dotenv import load_dotenv

load_dotenv()

from server import server  # noqa: E402

server_app = server.handler
