"""Dependency injection container."""

from collections.abc import Collection

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from resilience.util.di import Component, provider_instances


def create_container(mocked: Collection[Component] = ()) -> AsyncContainer:
    """Build the container.

    Production uses the default (nothing mocked). The test suite passes the
    components it replaces with in-memory implementations.
    """
    return make_async_container(*provider_instances(mocked), FastapiProvider())


def setup_di(app: FastAPI, container: AsyncContainer) -> None:
    """Attach the container to the app (``app.state.dishka_container``)."""
    setup_dishka(container, app)
