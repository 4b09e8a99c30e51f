"""Backend executors for the generic transacter."""

from .crdb import CockroachExecutor
from .dbapi import DBAPIExecutor
from .engine import EngineExecutor
from .orm import SessionExecutor

__all__ = [
    "CockroachExecutor",
    "DBAPIExecutor",
    "EngineExecutor",
    "SessionExecutor",
]
