"""
IOThread - 조정 컨텍스트를 막지 않도록 느린 작업을 워커에서 처리

아이콘 다운로드, 스크린샷 파일 쓰기/읽기, 방문 기록 조회 등을
ThreadPoolExecutor에서 실행하고, 완료 시 콜백으로 결과를 넘깁니다.
콜백은 워커 스레드에서 호출되므로 탭 상태를 건드리려면
TaskRunner.schedule_task로 조정 컨텍스트에 다시 올려야 합니다.
"""
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, Optional

from ..common.constants import IO_MAX_WORKERS
from ..profiling import MeasureTime


class RequestType(Enum):
    """I/O 요청 타입"""
    TOUCH_ICON = auto()      # 터치 아이콘 다운로드
    PICTURE_WRITE = auto()   # 스크린샷 저장
    PICTURE_READ = auto()    # 스크린샷 로드
    PICTURE_DELETE = auto()  # 스크린샷 삭제
    HISTORY_QUERY = auto()   # 방문 기록 조회
    GENERIC = auto()


@dataclass
class IOResponse:
    """I/O 요청 결과"""
    request_id: int
    request_type: RequestType
    result: Any = None
    error: Optional[str] = None
    cancelled: bool = False


class IOThread:
    """
    백그라운드 I/O 처리

    - ThreadPoolExecutor로 여러 요청 동시 처리
    - 요청 ID로 취소 가능 (아직 시작되지 않은 요청만 실제로 중단됨)
    - 스크린샷 파일 작업은 별도 인스턴스(단일 워커)에서 처리하여 느린 다운로드 뒤에 줄 서지 않음
    """

    def __init__(self, max_workers: int = IO_MAX_WORKERS, name: str = "IOWorker"):
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._request_id_counter = 0
        self._lock = threading.Lock()

        # 진행 중인 요청 추적
        self.pending_requests: Dict[int, Future] = {}
        self.running = True

    def _get_next_request_id(self) -> int:
        with self._lock:
            self._request_id_counter += 1
            return self._request_id_counter

    def _do_request(self, request_id: int, request_type: RequestType,
                    fn: Callable, args: tuple) -> IOResponse:
        """실제 작업 수행 (워커 스레드에서)"""
        with MeasureTime(f"io_{request_type.name}", "io"):
            try:
                return IOResponse(request_id, request_type, result=fn(*args))
            except Exception as e:
                return IOResponse(request_id, request_type, error=str(e) or type(e).__name__)

    def request(
        self,
        fn: Callable,
        *args,
        request_type: RequestType = RequestType.GENERIC,
        callback: Optional[Callable[[IOResponse], None]] = None,
    ) -> int:
        """
        비동기 요청

        Returns:
            request_id: 취소/추적용 ID
        """
        if not self.running:
            raise RuntimeError("IOThread is shut down")

        request_id = self._get_next_request_id()
        future = self.executor.submit(self._do_request, request_id, request_type, fn, args)
        with self._lock:
            self.pending_requests[request_id] = future

        def on_done(f: Future):
            with self._lock:
                self.pending_requests.pop(request_id, None)
            if callback is None:
                return
            if f.cancelled():
                callback(IOResponse(request_id, request_type, cancelled=True))
            else:
                callback(f.result())

        future.add_done_callback(on_done)
        return request_id

    def cancel(self, request_id: int) -> bool:
        """아직 실행되지 않은 요청 취소"""
        with self._lock:
            future = self.pending_requests.get(request_id)
        if future is None:
            return False
        return future.cancel()

    def get_pending_count(self) -> int:
        with self._lock:
            return len(self.pending_requests)

    def stop(self, wait: bool = False):
        self.running = False
        self.executor.shutdown(wait=wait)
