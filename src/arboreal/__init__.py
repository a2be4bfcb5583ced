"""Arboreal dependency injection framework.

Arboreal resolves identifiers to instances through a tree of injectors. Each
injector owns a set of providers (fixed values, classes or factories), lazily
builds and caches the values it provides, and delegates anything it does not
provide to its children. Classes declare the identifiers they need with
``Annotated`` markers; those dependencies are injected when the class is built.

Key Features:
    - Value, class and factory providers, with bare classes as shorthand
    - Constructor and field injection driven by ``Annotated[..., Inject(...)]``
    - Lazy, per-injector singleton caching
    - Top-down delegation through child injectors
    - Errors that name the exact identifier, consumer, injector and position

Basic Usage:
    >>> from typing import Annotated
    >>> from arboreal.domain import ValueProvider
    >>> from arboreal.injector import Injector
    >>> from arboreal.metadata import Inject
    >>>
    >>> class Service:
    ...     def __init__(self, dsn: Annotated[str, Inject("dsn")]):
    ...         self.dsn = dsn
    >>>
    >>> injector = Injector(
    ...     name="app",
    ...     initial_providers=[ValueProvider("dsn", "sqlite://"), Service],
    ... )
    >>> injector.get(Service).dsn
    'sqlite://'

The framework consists of several core modules:
    - injector: The resolution engine
    - registry: Provider normalisation and storage
    - instance_builder: Construction of classes with injected dependencies
    - metadata: Declaration of the dependencies a class needs
    - domain: Core domain models (providers, injection points)
    - errors: Framework-specific exceptions
"""
