from dataclasses import dataclass
from typing import Annotated

import pytest

from arboreal.domain import InjectionPoint, InjectionTarget, ValueProvider
from arboreal.errors import DependencyError
from arboreal.injector import Injector
from arboreal.metadata import (
    Inject,
    declare_dependencies,
    get_dependency_declarations,
    injectable,
)

CONSTRUCTOR = InjectionTarget.CONSTRUCTOR_PARAMETER
FIELD = InjectionTarget.FIELD


class Database:
    pass


def test_class_without_markers_declares_nothing():
    class Plain:
        name: str

        def __init__(self, size: int = 3):
            self.size = size

    assert get_dependency_declarations(Plain) == ()


def test_constructor_parameters_are_declared_in_signature_order():
    class Service:
        def __init__(
            self,
            db: Annotated[Database, Inject(Database)],
            dsn: Annotated[str, Inject("dsn")],
        ):
            pass

    assert get_dependency_declarations(Service) == (
        InjectionPoint(0, Database, CONSTRUCTOR),
        InjectionPoint(1, "dsn", CONSTRUCTOR),
    )


def test_fields_are_numbered_after_constructor_parameters():
    class Service:
        cache: Annotated[object, Inject("cache")]
        label: str

        def __init__(self, db: Annotated[Database, Inject(Database)]):
            pass

    assert get_dependency_declarations(Service) == (
        InjectionPoint(0, Database, CONSTRUCTOR),
        InjectionPoint(1, "cache", FIELD, "cache"),
    )


def test_unmarked_constructor_parameters_are_skipped():
    class Service:
        def __init__(self, db: Annotated[Database, Inject(Database)], retries: int = 3):
            pass

    assert get_dependency_declarations(Service) == (
        InjectionPoint(0, Database, CONSTRUCTOR),
    )


def test_inherited_fields_come_before_subclass_fields():
    class Base:
        db: Annotated[Database, Inject(Database)]

    class Derived(Base):
        dsn: Annotated[str, Inject("dsn")]

    assert get_dependency_declarations(Derived) == (
        InjectionPoint(0, Database, FIELD, "db"),
        InjectionPoint(1, "dsn", FIELD, "dsn"),
    )


def test_dataclass_fields_are_constructor_parameters():
    @dataclass(frozen=True)
    class Service:
        db: Annotated[Database, Inject(Database)]

    assert get_dependency_declarations(Service) == (
        InjectionPoint(0, Database, CONSTRUCTOR),
    )

    injector = Injector(initial_providers=[Database, Service])
    assert injector.get(Service).db is injector.get(Database)


def test_injectable_records_declarations_at_definition():
    @injectable
    class Service:
        def __init__(self, dsn: Annotated[str, Inject("dsn")]):
            self.dsn = dsn

    assert get_dependency_declarations(Service) == (
        InjectionPoint(0, "dsn", CONSTRUCTOR),
    )


def test_injectable_cannot_be_applied_twice():
    @injectable
    class Service:
        pass

    with pytest.raises(DependencyError, match="already been declared"):
        injectable(Service)


def test_explicit_declarations_drive_injection():
    class Legacy:
        def __init__(self, dsn):
            self.dsn = dsn

    declare_dependencies(
        Legacy,
        InjectionPoint(1, Database, FIELD, "database"),
        InjectionPoint(0, "dsn", CONSTRUCTOR),
    )

    injector = Injector(
        initial_providers=[ValueProvider("dsn", "sqlite://"), Database, Legacy]
    )
    legacy = injector.get(Legacy)

    assert legacy.dsn == "sqlite://"
    assert legacy.database is injector.get(Database)


def test_explicit_declarations_reject_duplicate_positions():
    class Legacy:
        pass

    with pytest.raises(DependencyError, match="Duplicate injection positions"):
        declare_dependencies(
            Legacy,
            InjectionPoint(0, "a", CONSTRUCTOR),
            InjectionPoint(0, "b", CONSTRUCTOR),
        )


def test_unresolvable_annotations_on_unmarked_class_are_ignored():
    class Unrelated:
        size: "NotDefinedAnywhere"

        def __init__(self, helper: "AlsoNotDefined" = None):
            self.helper = helper

    assert get_dependency_declarations(Unrelated) == ()

    injector = Injector(initial_providers=[Unrelated])
    assert isinstance(injector.get(Unrelated), Unrelated)


def test_string_marker_may_reference_unresolvable_types():
    class Repository:
        pass

    class Service:
        repository: "Annotated[Repository, Inject('repository')]"
        users: "Annotated[typing_only.UserStore, Inject('users')]"

    assert get_dependency_declarations(Service) == (
        InjectionPoint(0, "repository", FIELD, "repository"),
        InjectionPoint(1, "users", FIELD, "users"),
    )


def test_string_marker_with_unresolvable_identifier_raises():
    class Repository:
        pass

    class Service:
        repository: "Annotated[Repository, Inject(Repository)]"

    with pytest.raises(DependencyError, match=r"Cannot resolve .* of Service\.repository"):
        get_dependency_declarations(Service)


def test_unevaluable_marker_annotation_raises():
    class Service:
        repository: "Annotated[Repository, Inject('repository')"

    with pytest.raises(DependencyError, match=r"Cannot evaluate .* of Service\.repository"):
        get_dependency_declarations(Service)


def test_injected_parameter_must_not_follow_plain_parameter():
    class Service:
        def __init__(self, retries: int = 3, db: Annotated[Database, Inject(Database)] = None):
            pass

    with pytest.raises(DependencyError, match="follows parameter 'retries'"):
        get_dependency_declarations(Service)


def test_injected_parameter_must_not_be_keyword_only():
    with pytest.raises(DependencyError, match="'db' of Service is keyword-only"):

        @injectable
        class Service:
            def __init__(self, *, db: Annotated[Database, Inject(Database)]):
                pass
