"""ASGI entrypoint for the matchmaker API: ``uvicorn matchmaker.main:app``."""

from .core.app_factory import create_application

app = create_application()
