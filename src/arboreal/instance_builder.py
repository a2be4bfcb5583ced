"""Construction of class providers with their declared dependencies injected.

The :class:`InstanceBuilder` reads the injection points recorded for a class,
resolves each of them through the injector that owns the provider, passes the
constructor-parameter dependencies positionally to the constructor and then
assigns the field dependencies to the new instance.
"""

import logging
from typing import Any, Callable, TYPE_CHECKING

from arboreal.domain import InjectionPoint, InjectionTarget
from arboreal.errors import DependencyProviderNotFoundError
from arboreal.metadata import get_dependency_declarations

if TYPE_CHECKING:
    from arboreal.injector import Injector

__all__ = ["InstanceBuilder"]

logger = logging.getLogger(__name__)


class InstanceBuilder:
    """Build instances of classes for an :class:`~arboreal.injector.Injector`."""

    def __init__(
        self,
        injector: "Injector",
        declarations: Callable[[type], tuple[InjectionPoint, ...]] = get_dependency_declarations,
    ):
        self._injector = injector
        self._declarations = declarations

    def build(self, cls: type) -> Any:
        """Construct ``cls`` and inject its declared dependencies.

        Args:
            cls: The class to instantiate.

        Returns:
            The fully wired instance.

        Raises:
            DependencyProviderNotFoundError: If any declared dependency cannot be
                resolved. The failure of the nested lookup is discarded.
        """
        points = self._declarations(cls)
        parameter_points = sorted(
            (p for p in points if p.target is InjectionTarget.CONSTRUCTOR_PARAMETER),
            key=lambda p: p.position,
        )
        field_points = [p for p in points if p.target is InjectionTarget.FIELD]

        args = [self._resolve(cls, point) for point in parameter_points]
        instance = cls(*args)

        for point in field_points:
            setattr(instance, point.field_key, self._resolve(cls, point))

        logger.debug(
            "Constructed %s in injector '%s' with %d injected dependencies",
            cls.__name__,
            self._injector.name,
            len(points),
        )
        return instance

    def _resolve(self, cls: type, point: InjectionPoint) -> Any:
        try:
            return self._injector.get(point.identifier)
        except Exception:
            raise DependencyProviderNotFoundError(
                point.identifier, cls, self._injector.name, point.position
            ) from None
