"""Dependency injection module.

Providers are plain classes listed in ``PROVIDERS``. A provider with
subclasses is a mockable component: the subclass flagged
``__is_mock__ = True`` (registered by the test suite) replaces the
production one when the component is mocked.
"""

from collections.abc import Collection
from typing import Type, get_args

from resilience.util.di.application import ProdApplicationProvider
from resilience.util.di.base import Component, ProviderBase
from resilience.util.di.core import ProdConfigProvider
from resilience.util.di.domain import ProdDomainProvider
from resilience.util.di.infrastructure import (
    PersistenceProvider,
    ProdPersistenceProvider,
    ProdSupabaseProvider,
    SupabaseProvider,
)

PROVIDERS: list[Type[ProviderBase]] = [
    # Concrete
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    # Mockable components
    SupabaseProvider,
    PersistenceProvider,
]

COMPONENTS: frozenset[Component] = frozenset(get_args(Component))


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Pick the implementation of a provider.

    Raises:
        ValueError: If the component has no implementation of that kind
    """
    subclasses = base.__subclasses__()
    if not subclasses:
        return base

    impl = next(
        (c for c in subclasses if getattr(c, "__is_mock__", False) == use_mock),
        None,
    )
    if impl is None:
        kind = "mock" if use_mock else "production"
        raise ValueError(f"No {kind} implementation for {base.__mock_component__}")
    return impl


def provider_instances(mocked: Collection[Component] = ()) -> list[ProviderBase]:
    """Instantiate every provider, using mocks for the given components.

    Raises:
        ValueError: If an unknown component is named
    """
    unknown = set(mocked) - COMPONENTS
    if unknown:
        raise ValueError(f"Unknown components: {sorted(unknown)}")

    return [
        get_provider(base, use_mock=base.__mock_component__ in mocked)()
        for base in PROVIDERS
    ]


__all__ = [
    "COMPONENTS",
    "Component",
    "PROVIDERS",
    "ProviderBase",
    "get_provider",
    "provider_instances",
    "PersistenceProvider",
    "ProdApplicationProvider",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdPersistenceProvider",
    "ProdSupabaseProvider",
    "SupabaseProvider",
]
