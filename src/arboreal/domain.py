"""Domain models used throughout the framework."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Hashable, Optional, Union

__all__ = [
    "Identifier",
    "ValueProvider",
    "ClassProvider",
    "FactoryProvider",
    "Provider",
    "InjectionTarget",
    "InjectionPoint",
]


Identifier = Hashable
"""Key used to request a value from an injector.

Identifiers may be strings, token objects or classes used as their own key.
They are compared by ordinary equality and hashing; no normalisation is applied.

Example:
    >>> injector.get("database")   # Lookup by string
    >>> injector.get(DB_TOKEN)     # Lookup by token, e.g. DB_TOKEN = object()
    >>> injector.get(Database)     # Lookup by class
"""


@dataclass(frozen=True)
class ValueProvider:
    """Provides a fixed value.

    Attributes:
        provide: The identifier this provider satisfies.
        use_value: The value returned, as is, whenever the identifier is requested.
    """

    provide: Identifier
    use_value: Any


@dataclass(frozen=True)
class ClassProvider:
    """Provides an instance of a class, with its declared dependencies injected.

    Attributes:
        provide: The identifier this provider satisfies.
        use_class: The class to construct.
    """

    provide: Identifier
    use_class: type


@dataclass(frozen=True)
class FactoryProvider:
    """Provides the result of calling a factory.

    Attributes:
        provide: The identifier this provider satisfies.
        use_factory: Callable invoked with the injector that owns this provider.
    """

    provide: Identifier
    use_factory: Callable[[Any], Any]


Provider = Union[ValueProvider, ClassProvider, FactoryProvider]


class InjectionTarget(Enum):
    CONSTRUCTOR_PARAMETER = "constructor-parameter"
    FIELD = "field"


@dataclass(frozen=True)
class InjectionPoint:
    """A declaration that a class needs an identifier injected.

    Attributes:
        position: Index of the declaration, counted per class across constructor
            parameters and fields in declaration order.
        identifier: The identifier to resolve.
        target: Whether the value is passed to the constructor or assigned to a field.
        field_key: Name of the attribute to assign, for field declarations only.
    """

    position: int
    identifier: Identifier
    target: InjectionTarget
    field_key: Optional[str] = None
