"""Thread management for the tab core"""
from .task import Task, TaskRunner
from .tab_thread import TabThread
from .io_thread import IOThread, IOResponse, RequestType

__all__ = [
    "Task",
    "TaskRunner",
    "TabThread",
    "IOThread",
    "IOResponse",
    "RequestType",
]
