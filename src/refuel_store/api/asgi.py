"""ASGI entrypoint for the storefront API."""

from refuel_store.api.app import create_app
from refuel_store.containers import build_container

app = create_app(build_container())
