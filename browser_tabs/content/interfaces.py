"""
외부 협력자 계약

렌더링 엔진 뷰, 호스트 창, 북마크/히스토리 스토어, 쿠키 동기화는
이 패키지 밖에 있으며 여기 정의된 메서드로만 접근합니다.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

if TYPE_CHECKING:
    import skia
    from .picker_data import HistoryItem
    from .tab import Tab
    from ..common.errors import SslError


class WebView(ABC):
    """렌더링 엔진 뷰"""

    # BrowserSettings에 등록되는 뷰별 설정 객체
    settings: Any = None

    @abstractmethod
    def set_client(self, client):
        """이벤트를 받을 핸들러 연결 (None이면 해제)"""

    @abstractmethod
    def load_url(self, url: str):
        pass

    @abstractmethod
    def get_url(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_original_url(self) -> Optional[str]:
        pass

    @abstractmethod
    def save_state(self) -> Any:
        """네비게이션 히스토리 스냅샷 (실패 시 None)"""

    @abstractmethod
    def restore_state(self, history: Any) -> bool:
        """히스토리 복원. 엔진이 거부하면 False"""

    @abstractmethod
    def current_item(self) -> Optional["HistoryItem"]:
        pass

    @abstractmethod
    def capture_picture(self) -> Optional["skia.Image"]:
        """현재 화면 스크린샷"""

    @abstractmethod
    def restore_picture(self, image: "skia.Image"):
        pass

    @abstractmethod
    def on_resume(self):
        pass

    @abstractmethod
    def on_pause(self):
        pass

    @abstractmethod
    def destroy(self):
        pass

    def set_context_menu_listener(self, listener):
        pass

    def set_network_available(self, available: bool):
        pass

    def get_http_auth_username_password(self, host: str, realm: str) -> Optional[Tuple[str, str]]:
        return None


class SslErrorHandler(ABC):
    @abstractmethod
    def proceed(self):
        pass

    @abstractmethod
    def cancel(self):
        pass


class HttpAuthHandler(ABC):
    @abstractmethod
    def proceed(self, username: str, password: str):
        pass

    @abstractmethod
    def cancel(self):
        pass

    def use_http_auth_username_password(self) -> bool:
        return False


class BrowserHost(ABC):
    """
    탭을 소유한 호스트 창

    다이얼로그 표시와 UI 갱신을 담당합니다. 탭은 포그라운드일 때만
    UI 갱신 메서드를 호출합니다.
    """

    context_menu_listener: Any = None

    # 다이얼로그
    @abstractmethod
    def show_error_dialog(self, title: str, description: str, on_dismiss: Callable[[], None]):
        pass

    @abstractmethod
    def show_redirect_dialog(self, on_continue: Callable[[], None], on_cancel: Callable[[], None]):
        pass

    @abstractmethod
    def show_form_resubmission_dialog(self, on_resend: Callable[[], None],
                                      on_dont_resend: Callable[[], None]):
        pass

    @abstractmethod
    def show_ssl_warnings(self, view: WebView, handler: SslErrorHandler, error: "SslError",
                          warnings: List[str], on_cancel: Callable[[], None]):
        pass

    @abstractmethod
    def show_http_authentication(self, handler: HttpAuthHandler, host: str, realm: str):
        pass

    @abstractmethod
    def show_popup_confirmation(self, on_allow: Callable[[], None], on_block: Callable[[], None]):
        pass

    @abstractmethod
    def show_too_many_windows_dialog(self, subwindow: bool):
        pass

    # 페이지 상태 표시
    def on_page_started(self, view: WebView, url: str, favicon: Any):
        pass

    def on_page_finished(self, view: WebView, url: str):
        pass

    def on_progress_changed(self, view: WebView, progress: int):
        pass

    def set_url_title(self, url: Optional[str], title: Optional[str]):
        pass

    def set_favicon(self, icon: Any):
        pass

    def reset_title_and_revert_lock_icon(self):
        pass

    def should_override_url_loading(self, view: WebView, url: str) -> bool:
        return False

    def did_user_stop_loading(self) -> bool:
        return False

    def is_network_up(self) -> bool:
        return True

    # 썸네일 갱신 예약
    def schedule_thumbnail_update(self, view: WebView):
        pass

    def cancel_thumbnail_update(self, view: WebView):
        pass

    # 탭/창 조작
    @abstractmethod
    def open_tab_and_show(self, url: str, close_on_exit: bool, app_id: Optional[str]) -> Optional["Tab"]:
        pass

    @abstractmethod
    def switch_to_tab(self, index: int) -> bool:
        pass

    @abstractmethod
    def close_tab(self, tab: "Tab"):
        pass

    def attach_sub_window(self, tab: "Tab"):
        pass

    def dismiss_sub_window(self, tab: "Tab"):
        tab.dismiss_sub_window()

    def open_file_chooser(self, callback: Callable[[Optional[str]], None]):
        callback(None)


class BookmarksStore(ABC):
    """북마크/히스토리 스토어"""

    @abstractmethod
    def update_favicon(self, original_url: Optional[str], url: Optional[str], icon: Any):
        pass

    @abstractmethod
    def record_visit(self, url: str):
        pass

    @abstractmethod
    def find_bookmark_entries_matching(self, original_url: Optional[str],
                                       url: Optional[str]) -> List[Any]:
        pass

    @abstractmethod
    def update_touch_icon(self, rows: List[Any], icon: Any):
        pass

    def update_history_title(self, url_suffix: str, title: str):
        pass

    def get_visited_history(self) -> List[str]:
        return []


class CookieSync(ABC):
    @abstractmethod
    def reset_sync(self):
        pass

    @abstractmethod
    def sync(self):
        pass
