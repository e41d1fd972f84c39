"""Services module"""
from .filesystem import LocalFilesystem
from .registry import DatabaseRegistry, KeyProvider
from .batch_executor import BatchExecutor, run_request

__all__ = ["LocalFilesystem", "DatabaseRegistry", "KeyProvider", "BatchExecutor", "run_request"]
