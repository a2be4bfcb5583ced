"""Registration of the providers an injector owns."""

import inspect
import logging
from typing import Iterable, Optional, Union

from arboreal.domain import (
    ClassProvider,
    FactoryProvider,
    Identifier,
    Provider,
    ValueProvider,
)
from arboreal.errors import DependencyError

__all__ = ["ProviderRegistry", "normalise_provider"]

logger = logging.getLogger(__name__)

_PROVIDER_TYPES = (ValueProvider, ClassProvider, FactoryProvider)


def normalise_provider(entry: Union[Provider, type]) -> Provider:
    """Convert an entry of an initial provider list into a provider.

    A bare class is shorthand for a :class:`ClassProvider` that provides the
    class under its own identity.

    Raises:
        DependencyError: If the entry is neither a provider nor a class.

    Example:
        >>> normalise_provider(Database)
        ClassProvider(provide=<class 'Database'>, use_class=<class 'Database'>)
    """
    if isinstance(entry, _PROVIDER_TYPES):
        return entry
    if inspect.isclass(entry):
        return ClassProvider(entry, entry)
    raise DependencyError(f"{entry!r} is not a provider or a class")


class ProviderRegistry:
    """Providers keyed by the identifier they provide.

    Each identifier maps to at most one provider; registering an identifier
    again replaces the earlier provider. Insertion order is kept for
    diagnostics.
    """

    def __init__(self, initial_providers: Iterable[Union[Provider, type]] = ()):
        self._providers: dict[Identifier, Provider] = {}
        for entry in initial_providers:
            self.register(normalise_provider(entry))

    def register(self, provider: Provider):
        """Register a provider under its ``provide`` identifier.

        Args:
            provider: The provider to store.
        """
        if provider.provide in self._providers:
            logger.debug("Replacing provider for %r", provider.provide)
        else:
            logger.debug("Registering provider for %r", provider.provide)
        self._providers[provider.provide] = provider

    def lookup(self, identifier: Identifier) -> Optional[Provider]:
        return self._providers.get(identifier)

    def identifiers(self) -> list[Identifier]:
        """Registered identifiers, in the order they were first registered."""
        return list(self._providers)

    def __contains__(self, identifier: Identifier) -> bool:
        return identifier in self._providers

    def __len__(self) -> int:
        return len(self._providers)
