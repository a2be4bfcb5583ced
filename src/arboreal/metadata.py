"""Declaration of the dependencies a class wants injected.

Classes mark the identifiers they need with :class:`Inject` inside
``typing.Annotated``, either on constructor parameters or on class-level field
annotations::

    class Service:
        repository: Annotated[Repository, Inject("repository")]

        def __init__(self, db: Annotated[Database, Inject(Database)]):
            self.db = db

The resulting :class:`~arboreal.domain.InjectionPoint` lists are kept in a
process-wide registry keyed by class. Injectors only ever read from it.
"""

import builtins
import inspect
import logging
import sys
import threading
from dataclasses import dataclass
from typing import Annotated, Any, get_args, get_origin

from arboreal.domain import Identifier, InjectionPoint, InjectionTarget
from arboreal.errors import DependencyError

__all__ = [
    "Inject",
    "injectable",
    "declare_dependencies",
    "get_dependency_declarations",
]

logger = logging.getLogger(__name__)

_declarations: dict[type, tuple[InjectionPoint, ...]] = {}
_declarations_lock = threading.Lock()


@dataclass(frozen=True)
class Inject:
    """Marks a constructor parameter or field as requiring ``identifier``."""

    identifier: Identifier


def injectable(cls: type) -> type:
    """Class decorator recording the class's injection points when it is defined.

    Raises:
        DependencyError: If declarations were already recorded for the class.

    Example:
        @injectable
        class Service:
            def __init__(self, db: Annotated[Database, Inject(Database)]):
                self.db = db
    """
    declare_dependencies(cls, *_scan(cls))
    return cls


def declare_dependencies(cls: type, *points: InjectionPoint) -> None:
    """Explicitly record the injection points of a class.

    Useful for classes whose source cannot carry ``Inject`` annotations.

    Args:
        cls: The class the declarations belong to.
        points: The declarations, in any order.

    Raises:
        DependencyError: If declarations were already recorded for the class, or
            if two declarations share a position.
    """
    positions = [point.position for point in points]
    if len(set(positions)) != len(positions):
        raise DependencyError(
            f"Duplicate injection positions {sorted(positions)} declared for {cls.__name__}"
        )

    with _declarations_lock:
        if cls in _declarations:
            raise DependencyError(
                f"Dependencies of {cls.__name__} have already been declared"
            )
        _declarations[cls] = tuple(sorted(points, key=lambda point: point.position))

    logger.debug("Declared %d injection point(s) for %s", len(points), cls.__name__)


def get_dependency_declarations(cls: type) -> tuple[InjectionPoint, ...]:
    """Look up the injection points of a class, ordered by position.

    Classes that were never registered are scanned on first lookup and the
    result is remembered.

    Returns:
        The declarations of the class; empty if it declares none.
    """
    with _declarations_lock:
        declared = _declarations.get(cls)
        if declared is None:
            declared = _declarations[cls] = tuple(_scan(cls))
        return declared


def _scan(cls: type) -> list[InjectionPoint]:
    """Collect constructor-parameter then field injection points of ``cls``.

    Positions are numbered from 0 across both kinds, constructor parameters in
    signature order first. Injected constructor parameters are passed
    positionally, so they must lead the signature.

    Raises:
        DependencyError: If an injected parameter is keyword-only or follows a
            parameter that is not injected, or if an annotation carrying an
            ``Inject`` marker cannot be evaluated.
    """
    points: list[InjectionPoint] = []
    parameter_names = set()
    not_injected = None

    for param, annotation in _constructor_annotations(cls):
        parameter_names.add(param.name)
        marker = _find_marker(annotation)
        if marker is None:
            not_injected = not_injected or param.name
            continue
        if param.kind is param.KEYWORD_ONLY:
            raise DependencyError(
                f"Injected parameter '{param.name}' of {cls.__name__} is keyword-only"
            )
        if not_injected is not None:
            raise DependencyError(
                f"Injected parameter '{param.name}' of {cls.__name__} follows "
                f"parameter '{not_injected}', which is not injected"
            )
        points.append(
            InjectionPoint(
                len(points), marker.identifier, InjectionTarget.CONSTRUCTOR_PARAMETER
            )
        )

    for name, annotation in _field_annotations(cls).items():
        if name in parameter_names:
            continue
        marker = _find_marker(annotation)
        if marker is not None:
            points.append(
                InjectionPoint(
                    len(points), marker.identifier, InjectionTarget.FIELD, name
                )
            )

    return points


def _constructor_annotations(cls: type) -> list[tuple[inspect.Parameter, Any]]:
    init = cls.__init__
    if init is object.__init__:
        return []

    raw = inspect.get_annotations(init)
    globalns = getattr(init, "__globals__", {})
    return [
        (param, _evaluate(raw.get(name), globalns, {}, cls, name))
        for name, param in list(inspect.signature(init).parameters.items())[1:]
        if param.kind not in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
    ]


def _field_annotations(cls: type) -> dict[str, Any]:
    """Class-level annotations of ``cls`` and its bases, base classes first."""
    annotations: dict[str, Any] = {}
    for base in reversed(cls.__mro__):
        if base is object:
            continue
        module = sys.modules.get(base.__module__)
        globalns = vars(module) if module else {}
        for name, annotation in inspect.get_annotations(base).items():
            annotations[name] = _evaluate(annotation, globalns, dict(vars(base)), cls, name)
    return annotations


def _evaluate(annotation, globalns, localns, cls: type, name: str) -> Any:
    """Evaluate a string annotation far enough to find an ``Inject`` marker.

    Names that cannot be resolved, such as imports guarded by ``TYPE_CHECKING``
    or classes local to a function under postponed evaluation, are replaced by
    placeholders. That only matters if the marker's identifier is one of them.
    """
    if not isinstance(annotation, str):
        return annotation

    try:
        return eval(annotation, globalns, localns)
    except Exception:
        pass

    try:
        value = eval(annotation, globalns, _Unresolvable(globalns, localns))
    except Exception:
        if "Inject" in annotation:
            raise DependencyError(
                f"Cannot evaluate annotation {annotation!r} of {cls.__name__}.{name}"
            )
        return None

    marker = _find_marker(value)
    if marker is not None and isinstance(marker.identifier, _UnresolvedName):
        raise DependencyError(
            f"Cannot resolve injected identifier {marker.identifier!r} "
            f"of {cls.__name__}.{name}"
        )
    return value


class _UnresolvedName:
    def __init__(self, name: str):
        self.name = name

    def __getattr__(self, attr):
        if attr.startswith("__"):
            raise AttributeError(attr)
        return _UnresolvedName(f"{self.name}.{attr}")

    def __getitem__(self, item):
        return self

    def __call__(self, *args, **kwargs):
        return self

    def __repr__(self):
        return self.name


class _Unresolvable(dict):
    """Local namespace resolving unknown names to :class:`_UnresolvedName`."""

    def __init__(self, globalns, localns):
        super().__init__(localns)
        self._globalns = globalns

    def __missing__(self, key):
        if key in self._globalns:
            return self._globalns[key]
        if hasattr(builtins, key):
            return getattr(builtins, key)
        return _UnresolvedName(key)


def _find_marker(annotation) -> Any:
    if get_origin(annotation) is not Annotated:
        return None

    _, *metadata = get_args(annotation)
    return next((m for m in metadata if isinstance(m, Inject)), None)
