"""ASGI entry point: ``uvicorn wagateway.main:app``."""

from wagateway.core.app import create_app

app = create_app()
