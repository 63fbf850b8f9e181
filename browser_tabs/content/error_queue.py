"""
ErrorQueue - 에러 다이얼로그를 한 번에 하나씩 보여주는 큐

- 같은 에러 코드는 큐에 한 번만 들어감
- 포그라운드이고 큐가 비어 있었을 때만 즉시 표시
- 사용자가 닫으면 다음 에러를 표시, 비면 큐 자체를 해제
- 백그라운드에서는 절대 표시하지 않고 쌓아 둠
"""
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Deque, List, Optional

from ..common.constants import FILE_ERROR_TITLE, NETWORK_ERROR_TITLE
from ..common.errors import ErrorCode

if TYPE_CHECKING:
    from .tab import Tab


@dataclass(frozen=True)
class ErrorDialog:
    title: str
    description: str
    error: int


class ErrorQueue:
    def __init__(self, tab: "Tab"):
        self._tab = tab
        # None은 "할당되지 않음", 빈 deque는 만들지 않음
        self._queued: Optional[Deque[ErrorDialog]] = None

    @property
    def allocated(self) -> bool:
        return self._queued is not None

    @property
    def pending(self) -> List[ErrorDialog]:
        return list(self._queued) if self._queued else []

    def __len__(self):
        return len(self._queued) if self._queued else 0

    def queue_error(self, err: int, desc: str) -> bool:
        """에러를 큐에 추가. 같은 코드가 이미 있으면 무시하고 False"""
        if self._queued is None:
            self._queued = deque()
        for d in self._queued:
            if d.error == err:
                return False
        title = FILE_ERROR_TITLE if err == ErrorCode.FILE_NOT_FOUND else NETWORK_ERROR_TITLE
        dialog = ErrorDialog(title, desc, int(err))
        self._queued.append(dialog)

        if len(self._queued) == 1 and self._tab.in_foreground:
            self._show_error(dialog)
        return True

    def process_next_error(self):
        """현재 표시 중인 에러가 닫혔을 때 호출"""
        if self._queued is None:
            return
        self._queued.popleft()
        if not self._queued:
            self._queued = None
            return
        self._show_error(self._queued[0])

    def show_pending(self):
        """포그라운드로 올라왔을 때 맨 앞 에러를 표시"""
        if self._queued:
            self._show_error(self._queued[0])

    def clear(self):
        self._queued = None

    def _show_error(self, dialog: ErrorDialog):
        if not self._tab.in_foreground:
            return
        self._tab.host.show_error_dialog(dialog.title, dialog.description,
                                         self.process_next_error)
