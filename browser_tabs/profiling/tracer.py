"""
Chrome Tracing Format 트레이서 + 진단 로그

사용법:
    # 구간 측정
    with MeasureTime("freeze", "lifecycle"):
        tab.freeze()

    # 진단 로그 (출력 + instant 이벤트 기록)
    log_error("Tab", "onReceivedError -2 http://x host lookup")

    # 출력 파일을 지정한 경우에만 JSON 저장
    Tracer.get().set_output_file("trace.json")
    Tracer.get().finish()

결과 파일은 chrome://tracing 에서 열 수 있습니다.
"""
import json
import threading
import time
from collections import deque
from functools import wraps
from typing import Any, Callable, Deque, Dict, List, Optional

from ..common.constants import TRACE_MAX_EVENTS


class TraceEvent:
    """Chrome Trace Event Format의 단일 이벤트"""

    def __init__(
        self,
        name: str,
        category: str,
        phase: str,
        timestamp: float,
        thread_id: int,
        args: Optional[Dict[str, Any]] = None,
        scope: Optional[str] = None,
    ):
        self.name = name
        self.cat = category
        self.ph = phase  # 'B' = begin, 'E' = end, 'i' = instant
        self.ts = timestamp  # microseconds
        self.tid = thread_id
        self.args = args or {}
        self.scope = scope

    def to_dict(self, process_id: int) -> Dict[str, Any]:
        event = {
            "name": self.name,
            "cat": self.cat,
            "ph": self.ph,
            "ts": self.ts,
            "tid": self.tid,
            "pid": process_id,
        }
        if self.args:
            event["args"] = self.args
        if self.scope:
            event["s"] = self.scope
        return event


class Tracer:
    """싱글톤 트레이서 - 최근 이벤트를 링 버퍼에 보관"""

    _instance: Optional["Tracer"] = None
    _lock = threading.Lock()

    def __init__(self, max_events: int = TRACE_MAX_EVENTS):
        self.events: Deque[TraceEvent] = deque(maxlen=max_events)
        self.lock = threading.Lock()
        self.enabled = True
        self.start_time = time.perf_counter()
        self.output_file: Optional[str] = None
        self.thread_names: Dict[int, str] = {}
        self.process_name = "BrowserTabs"
        self.process_id = 1

    @classmethod
    def get(cls) -> "Tracer":
        """싱글톤 인스턴스 반환"""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = Tracer()
        return cls._instance

    def set_output_file(self, filename: Optional[str]):
        self.output_file = filename

    def set_thread_name(self, name: str, thread_id: Optional[int] = None):
        if thread_id is None:
            thread_id = threading.get_ident()
        self.thread_names[thread_id] = name

    def get_timestamp(self) -> float:
        """시작 시점 기준 마이크로초 반환"""
        return (time.perf_counter() - self.start_time) * 1_000_000

    def _record(self, name: str, category: str, phase: str,
                args: Optional[Dict] = None, scope: Optional[str] = None):
        if not self.enabled:
            return
        event = TraceEvent(
            name=name,
            category=category,
            phase=phase,
            timestamp=self.get_timestamp(),
            thread_id=threading.get_ident(),
            args=args,
            scope=scope,
        )
        with self.lock:
            self.events.append(event)

    def begin(self, name: str, category: str = "function", args: Optional[Dict] = None):
        self._record(name, category, "B", args)

    def end(self, name: str, category: str = "function", args: Optional[Dict] = None):
        self._record(name, category, "E", args)

    def instant(self, name: str, category: str = "instant", scope: str = "t",
                args: Optional[Dict] = None):
        """인스턴트 이벤트 (scope: 't' = thread, 'p' = process, 'g' = global)"""
        self._record(name, category, "i", args, scope)

    def find(self, category: Optional[str] = None, name: Optional[str] = None) -> List[TraceEvent]:
        """조건에 맞는 이벤트 목록"""
        with self.lock:
            return [e for e in self.events
                    if (category is None or e.cat == category)
                    and (name is None or e.name == name)]

    def _generate_metadata_events(self) -> List[Dict]:
        metadata = [{
            "name": "process_name",
            "ph": "M",
            "pid": self.process_id,
            "args": {"name": self.process_name},
        }]
        for tid, name in self.thread_names.items():
            metadata.append({
                "name": "thread_name",
                "ph": "M",
                "pid": self.process_id,
                "tid": tid,
                "args": {"name": name},
            })
        return metadata

    def finish(self):
        """출력 파일이 지정되어 있으면 JSON으로 저장"""
        if not self.output_file:
            return

        with self.lock:
            trace_data = {
                "traceEvents": (
                    self._generate_metadata_events() +
                    [e.to_dict(self.process_id) for e in self.events]
                ),
                "displayTimeUnit": "ms",
            }

        with open(self.output_file, "w") as f:
            json.dump(trace_data, f)

        print(f"Trace saved to {self.output_file}")

    def clear(self):
        with self.lock:
            self.events.clear()
            self.start_time = time.perf_counter()


class MeasureTime:
    """
    시간 측정 컨텍스트 매니저 / 데코레이터

    사용법:
        with MeasureTime("save_state", category="snapshot"):
            ...

        @MeasureTime.trace("restore_state", "snapshot")
        def restore(): ...
    """

    def __init__(self, name: str, category: str = "function", args: Optional[Dict] = None):
        self.name = name
        self.category = category
        self.args = args
        self.tracer = Tracer.get()

    def __enter__(self):
        self.tracer.begin(self.name, self.category, self.args)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.tracer.end(self.name, self.category)
        return False

    @staticmethod
    def trace(name: str, category: str = "function") -> Callable:
        def decorator(func: Callable) -> Callable:
            @wraps(func)
            def wrapper(*args, **kwargs):
                with MeasureTime(name, category):
                    return func(*args, **kwargs)
            return wrapper
        return decorator


def trace_instant(name: str, category: str = "instant", args: Optional[Dict] = None):
    Tracer.get().instant(name, category, args=args)


def set_thread_name(name: str):
    Tracer.get().set_thread_name(name)


def _log(level: str, tag: str, message: str):
    print(f"{level[0].upper()}/{tag}: {message}")
    Tracer.get().instant(tag, "log", args={"level": level, "message": message})


def log_error(tag: str, message: str):
    _log("error", tag, message)


def log_warning(tag: str, message: str):
    _log("warning", tag, message)


def log_info(tag: str, message: str):
    _log("info", tag, message)
