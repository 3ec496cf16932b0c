"""Base classes for dependency injection providers."""

from typing import ClassVar, Literal

from dishka import Provider

# Infrastructure that tests swap for in-memory or mock implementations
Component = Literal["supabase", "persistence"]


class ProviderBase(Provider):
    """Base for all providers.

    Attributes:
        __mock_component__: Component a mockable base stands for, None when
            the provider is concrete
        __is_mock__: Set on the test implementation of a component
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
