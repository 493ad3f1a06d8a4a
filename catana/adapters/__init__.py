"""Adapters — system bindings for step actions.

Public re-exports for convenient access.
"""

from catana.adapters.base import Adapter, CommandInvoker, ExecutionContext
from catana.adapters.mock import MockAdapter, MockReconciler, RecordingInvoker
from catana.adapters.registry import AdapterRegistry, build_default_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "CommandInvoker",
    "ExecutionContext",
    "MockAdapter",
    "MockReconciler",
    "RecordingInvoker",
    "build_default_registry",
]
