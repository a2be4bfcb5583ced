"""
Hierarchical resolution of identifiers into instances.

An :class:`Injector` owns a registry of providers, a cache of the values it has
resolved and an ordered tuple of child injectors. Looking up an identifier
consults, in order:

1. the cache;
2. the injector's own providers, caching the result;
3. each child injector in turn, skipping children whose subtree has no
   provider for the identifier.

If none of these yields a value, a :class:`ServiceIdentifierNotFoundError`
naming this injector is raised. Children never see their parent: resolution
only ever travels down the tree, and a child's result is cached on the child
that produced it.

Failures raised while a provider is being resolved (a broken factory, a
constructor that raises, an unresolvable nested dependency) are never relabelled
on the way up, so they keep the name of the injector that actually attempted
the nested lookup.
"""

import logging
import threading
from typing import Any, Iterable, Optional, Union

from arboreal.domain import (
    FactoryProvider,
    Identifier,
    Provider,
    ValueProvider,
)
from arboreal.errors import ServiceIdentifierNotFoundError
from arboreal.instance_builder import InstanceBuilder
from arboreal.registry import ProviderRegistry

__all__ = ["Injector", "DEFAULT_INJECTOR_NAME"]

logger = logging.getLogger(__name__)

DEFAULT_INJECTOR_NAME = "Injector"


class Injector:
    """
    A node in a tree of injectors, resolving identifiers from its own providers
    or from its children.

    Attributes:
        name: Diagnostic label used in error messages only.
        children: Child injectors, consulted in order for identifiers this
            injector does not provide.

    Lookups are serialised per injector, and the lock is held while this
    injector runs its own factories and constructors. Factories that look up
    values in other injectors from several threads must do so in a consistent
    order (for example parent before child), or two threads can deadlock.

    Example:
        >>> repositories = Injector(name="repositories", initial_providers=[UserRepository])
        >>> app = Injector(
        ...     name="app",
        ...     initial_providers=[ValueProvider("dsn", "postgres://localhost/app")],
        ...     children=[repositories],
        ... )
        >>> app.get(UserRepository)  # Resolved and cached by the child
    """

    def __init__(
        self,
        name: Optional[str] = None,
        initial_providers: Iterable[Union[Provider, type]] = (),
        children: Iterable["Injector"] = (),
    ):
        self.name = name if name is not None else DEFAULT_INJECTOR_NAME
        self.children: tuple["Injector", ...] = tuple(children)
        self._registry = ProviderRegistry(initial_providers)
        self._cache: dict[Identifier, Any] = {}
        self._lock = threading.RLock()
        self._instance_builder = InstanceBuilder(self)

    def get(self, identifier: Identifier) -> Any:
        """Resolve an identifier to its value.

        Args:
            identifier: A string, token or class identifying the value.

        Returns:
            The cached or newly resolved value.

        Raises:
            ServiceIdentifierNotFoundError: If neither this injector nor any of its
                children provides the identifier.
            DependencyProviderNotFoundError: If a class provider has a declared
                dependency that cannot be resolved.
        """
        with self._lock:
            if identifier in self._cache:
                logger.debug("Cache hit for %r in injector '%s'", identifier, self.name)
                return self._cache[identifier]

            provider = self._registry.lookup(identifier)
            if provider is not None:
                value = self._resolve(provider)
                self._cache[identifier] = value
                return value

        return self._get_from_children(identifier)

    def __getitem__(self, identifier: Identifier) -> Any:
        return self.get(identifier)

    def __contains__(self, identifier: Identifier) -> bool:
        """Whether this injector or any descendant has a provider for ``identifier``."""
        return identifier in self._registry or any(
            identifier in child for child in self.children
        )

    def __repr__(self):
        return f"Injector(name={self.name!r}, providers={self._registry.identifiers()!r})"

    def _resolve(self, provider: Provider) -> Any:
        logger.debug("Resolving %r in injector '%s'", provider.provide, self.name)

        if isinstance(provider, ValueProvider):
            return provider.use_value
        if isinstance(provider, FactoryProvider):
            return provider.use_factory(self)
        return self._instance_builder.build(provider.use_class)

    def _get_from_children(self, identifier: Identifier) -> Any:
        for child in self.children:
            logger.debug(
                "Delegating %r from injector '%s' to '%s'", identifier, self.name, child.name
            )
            try:
                return child.get(identifier)
            except ServiceIdentifierNotFoundError as e:
                if e.identifier != identifier:
                    raise

        raise ServiceIdentifierNotFoundError(identifier, self.name)
