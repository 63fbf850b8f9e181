"""
터치 아이콘 다운로드 조정

탭마다 진행 중인 다운로드는 최대 하나입니다.
- precomposed 아이콘이 들어오면 진행 중인 일반 아이콘 다운로드를 취소하고 새로 시작
- 그 외에는 이미 진행 중이면 새 요청을 버림
- 새 페이지 로드가 시작되면 진행 중인 다운로드를 탭에서 떼어냄 (취소하지 않음)
- 탭이 파괴되면 취소

다운로드는 IOThread에서 실행되고, 완료는 TaskRunner를 통해
조정 컨텍스트로 돌아와 적용됩니다.
"""
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from ..profiling import log_warning, trace_instant
from ..rendering import decode_image
from ..threads import IOResponse, RequestType, Task

if TYPE_CHECKING:
    from .interfaces import WebView
    from .tab import Tab

LOGTAG = "TouchIcon"


class DownloadTouchIcon:
    """한 번의 아이콘 다운로드"""

    def __init__(self, tab: "Tab", rows: List[Any], original_url: Optional[str],
                 url: Optional[str], precomposed: bool):
        self.tab: Optional["Tab"] = tab
        self.rows = rows
        self.original_url = original_url
        self.url = url
        self.precomposed = precomposed
        self.cancelled = False
        self.finished = False
        self.request_id: Optional[int] = None

        control = tab.control
        self._bookmarks = control.bookmarks
        self._io_thread = control.io_thread
        self._task_runner = control.task_runner
        self._fetch: Callable[[str], bytes] = control.fetch_icon

    def execute(self, icon_url: str):
        self.icon_url = icon_url
        self.request_id = self._io_thread.request(
            self._fetch, icon_url,
            request_type=RequestType.TOUCH_ICON,
            callback=self._on_downloaded,
        )

    def cancel(self):
        self.cancelled = True
        if self.request_id is not None:
            self._io_thread.cancel(self.request_id)

    def _on_downloaded(self, response: IOResponse):
        # 워커 스레드 -> 조정 컨텍스트
        self._task_runner.schedule_task(Task(self._post_execute, response))

    def _post_execute(self, response: IOResponse):
        self.finished = True
        tab = self.tab
        if tab is not None and tab.touch_icons.loader is self:
            tab.touch_icons.loader = None

        if self.cancelled or response.cancelled:
            trace_instant("touch_icon_discarded", "icon", {"url": self.icon_url})
            return
        if response.error:
            log_warning(LOGTAG, f"download failed {self.icon_url}: {response.error}")
            return

        icon = decode_image(response.result)
        if icon is None:
            log_warning(LOGTAG, f"not an image: {self.icon_url}")
            return
        # 떼어낸 로더도 시작 시점의 url로 저장하므로 새 페이지에 잘못 붙지 않음
        self._bookmarks.update_touch_icon(self.rows, icon)


class TouchIconCoordinator:
    def __init__(self, tab: "Tab"):
        self._tab = tab
        self.loader: Optional[DownloadTouchIcon] = None

    def on_touch_icon_url(self, view: "WebView", url: str, precomposed: bool) -> bool:
        """새 다운로드를 시작했으면 True"""
        bookmarks = self._tab.control.bookmarks
        original_url, page_url = view.get_original_url(), view.get_url()
        rows = bookmarks.find_bookmark_entries_matching(original_url, page_url)
        if not rows:
            return False

        # precomposed 아이콘이 일반 아이콘보다 우선
        if precomposed and self.loader is not None and not self.loader.precomposed:
            self.loader.cancel()
            self.loader = None

        if self.loader is not None:
            return False

        self.loader = DownloadTouchIcon(self._tab, rows, original_url, page_url, precomposed)
        self.loader.execute(url)
        return True

    def on_page_started(self):
        """이전 페이지의 다운로드를 탭에서 분리 (완료되면 그대로 저장됨)"""
        if self.loader is not None:
            self.loader.tab = None
            self.loader = None

    def cancel(self):
        if self.loader is not None:
            self.loader.cancel()
            self.loader.tab = None
            self.loader = None
