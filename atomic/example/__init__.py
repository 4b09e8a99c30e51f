"""Minimal example of how to use the generic transacter."""

from .models import Bar, Base, Foo
from .repositories import BarRepo, FooRepo
from .resources import PairService, Resources, resources_factory
from .runner import build_transacter, create_schema, run_example

__all__ = [
    "Bar",
    "BarRepo",
    "Base",
    "Foo",
    "FooRepo",
    "PairService",
    "Resources",
    "build_transacter",
    "create_schema",
    "resources_factory",
    "run_example",
]
