"""Exceptions raised while registering providers or resolving identifiers."""

import inspect
from typing import Any

__all__ = [
    "DependencyError",
    "ServiceIdentifierNotFoundError",
    "DependencyProviderNotFoundError",
    "describe_identifier",
]


def describe_identifier(identifier: Any) -> str:
    """Render an identifier for use in error messages.

    Example:
        >>> describe_identifier(Database)  # Returns "Database"
        >>> describe_identifier("db")      # Returns "'db'"
    """
    if inspect.isclass(identifier):
        return identifier.__name__
    return repr(identifier)


class DependencyError(Exception):
    """Raised when a component's dependency cannot be resolved or is misannotated."""

    pass


class ServiceIdentifierNotFoundError(DependencyError):
    """Raised when an injector and all of its children have no provider for an identifier.

    Attributes:
        identifier: The identifier that was requested.
        container_name: Name of the injector whose search was exhausted.
    """

    def __init__(self, identifier: Any, container_name: str):
        super().__init__(
            f"No provider for {describe_identifier(identifier)} "
            f"found in injector '{container_name}'"
        )
        self.identifier = identifier
        self.container_name = container_name

    def __eq__(self, other):
        if not isinstance(other, ServiceIdentifierNotFoundError):
            return NotImplemented
        return (self.identifier, self.container_name) == (
            other.identifier,
            other.container_name,
        )

    def __hash__(self):
        return hash((type(self), self.container_name))


class DependencyProviderNotFoundError(DependencyError):
    """Raised when a declared dependency of a class cannot be satisfied.

    Attributes:
        missing_identifier: The identifier the class asked to have injected.
        consumer_type: The class being constructed.
        container_name: Name of the injector that attempted the construction.
        position: Declared position of the failed injection point.
    """

    def __init__(
        self,
        missing_identifier: Any,
        consumer_type: type,
        container_name: str,
        position: int,
    ):
        super().__init__(
            f"Unable to resolve dependency {describe_identifier(missing_identifier)} "
            f"at position {position} of {describe_identifier(consumer_type)} "
            f"in injector '{container_name}'"
        )
        self.missing_identifier = missing_identifier
        self.consumer_type = consumer_type
        self.container_name = container_name
        self.position = position

    def __eq__(self, other):
        if not isinstance(other, DependencyProviderNotFoundError):
            return NotImplemented
        return (
            self.missing_identifier,
            self.consumer_type,
            self.container_name,
            self.position,
        ) == (
            other.missing_identifier,
            other.consumer_type,
            other.container_name,
            other.position,
        )

    def __hash__(self):
        return hash((type(self), self.container_name, self.position))
