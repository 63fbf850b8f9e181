"""프로파일링 및 진단 로그"""
from .tracer import (
    Tracer,
    TraceEvent,
    MeasureTime,
    trace_instant,
    set_thread_name,
    log_error,
    log_warning,
    log_info,
)

__all__ = [
    'Tracer',
    'TraceEvent',
    'MeasureTime',
    'trace_instant',
    'set_thread_name',
    'log_error',
    'log_warning',
    'log_info',
]
