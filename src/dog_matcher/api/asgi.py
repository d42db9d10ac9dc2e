"""ASGI entrypoint for the dog matcher API."""

from dog_matcher.api.app import create_app
from dog_matcher.containers import build_container

app = create_app(build_container())
