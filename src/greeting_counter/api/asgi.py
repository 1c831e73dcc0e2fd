"""ASGI entrypoint for the greeting counter API."""

from greeting_counter.api.app import create_app
from greeting_counter.containers import build_container

app = create_app(build_container())
