"""
BrowserSettings - 모든 뷰가 공유하는 설정/옵저버 레지스트리

뷰가 생성될 때 add_observer, 파괴될 때 delete_observer를 정확히
한 번씩 호출해야 합니다. 설정이 바뀌면 등록된 모든 뷰 설정에
update가 전달됩니다.
"""
from typing import Any, FrozenSet, Iterable, List, Optional

from ..common.constants import SUPPRESSED_ERROR_CODES
from ..common.errors import ErrorCode
from ..profiling import log_error

LOGTAG = "BrowserSettings"


class BrowserSettings:
    def __init__(self, show_security_warnings: bool = True, show_error_console: bool = False,
                 suppressed_error_codes: Optional[Iterable[ErrorCode]] = None):
        self.show_security_warnings = show_security_warnings
        # 콘솔 메시지가 오면 탭의 에러 콘솔을 보여줄지 (개발자용)
        self.show_error_console = show_error_console
        self.suppressed_error_codes: FrozenSet[int] = frozenset(
            SUPPRESSED_ERROR_CODES if suppressed_error_codes is None else suppressed_error_codes
        )
        self.observers: List[Any] = []

    def add_observer(self, view_settings: Any) -> "BrowserSettings":
        if any(o is view_settings for o in self.observers):
            log_error(LOGTAG, f"observer registered twice: {view_settings!r}")
            return self
        self.observers.append(view_settings)
        self._push(view_settings)
        return self

    def delete_observer(self, view_settings: Any) -> bool:
        for i, o in enumerate(self.observers):
            if o is view_settings:
                del self.observers[i]
                return True
        log_error(LOGTAG, f"observer was not registered: {view_settings!r}")
        return False

    def is_suppressed(self, error_code: int) -> bool:
        return error_code in self.suppressed_error_codes

    def set_suppressed_error_codes(self, codes: Iterable[ErrorCode]):
        self.suppressed_error_codes = frozenset(codes)

    def set_show_security_warnings(self, enabled: bool):
        self.show_security_warnings = enabled
        for o in self.observers:
            self._push(o)

    def _push(self, view_settings: Any):
        update = getattr(view_settings, "update", None)
        if update is not None:
            update(self)
