"""ASGI entrypoint for the asset tree API."""

from props_assets.api.app import create_app
from props_assets.containers import build_container

app = create_app(build_container())
