"""
TabClient - 탭 하나의 엔진 이벤트 핸들러

엔진 뷰가 보내는 모든 Event는 handle()로 들어옵니다.
탭이 메모리 부족으로 내려갔거나 파괴된 뒤, 또는 탭이 더 이상
소유하지 않는 뷰에서 온 이벤트는 무시합니다.

SubWindowClient는 서브윈도우 뷰의 이벤트 중 일부를 같은 Event 값
그대로 메인 TabClient에 넘깁니다.
"""
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from ..common.constants import EMPTY_URL, SQLITE_MAX_LIKE_PATTERN_LENGTH
from ..common.errors import BookmarksError
from ..profiling import log_error, log_info, log_warning, trace_instant
from ..threads import IOResponse, RequestType, Task
from .error_console import ConsoleShowState
from .events import Event, EventType
from .tab_tree import add_child_tab

if TYPE_CHECKING:
    from .tab import Tab

LOGTAG = "Tab"


def strip_client_param(url: str) -> str:
    """구글 검색 url의 client=ms- 파라미터 제거 (자동완성 목록에 남지 않도록)"""
    index = url.find("client=ms-")
    if index > 0 and ".google." in url:
        end = url.find("&", index)
        if end > 0:
            return url[:index] + url[end + 1:]
        # 바로 앞 글자는 '?' 또는 '&'
        return url[:index - 1]
    return url


def history_url_suffix(url: str) -> str:
    if url.startswith("http://www."):
        return url[11:]
    if url.startswith("http://"):
        return url[7:]
    return url


class TabClient:
    def __init__(self, tab: "Tab"):
        self.tab = tab
        self._handlers: Dict[EventType, Callable[[Event], Any]] = {
            EventType.PAGE_STARTED: self._on_page_started,
            EventType.PAGE_FINISHED: self._on_page_finished,
            EventType.OVERRIDE_URL_LOADING: self._should_override_url_loading,
            EventType.LOAD_RESOURCE: self._on_load_resource,
            EventType.TOO_MANY_REDIRECTS: self._on_too_many_redirects,
            EventType.RECEIVED_ERROR: self._on_received_error,
            EventType.FORM_RESUBMISSION: self._on_form_resubmission,
            EventType.UPDATE_VISITED_HISTORY: self._do_update_visited_history,
            EventType.SSL_ERROR: self._on_received_ssl_error,
            EventType.HTTP_AUTH_REQUEST: self._on_received_http_auth_request,
            EventType.CREATE_WINDOW: self._on_create_window,
            EventType.REQUEST_FOCUS: self._on_request_focus,
            EventType.CLOSE_WINDOW: self._on_close_window,
            EventType.PROGRESS_CHANGED: self._on_progress_changed,
            EventType.RECEIVED_TITLE: self._on_received_title,
            EventType.RECEIVED_ICON: self._on_received_icon,
            EventType.TOUCH_ICON_URL: self._on_received_touch_icon_url,
            EventType.GEOLOCATION_SHOW_PROMPT: self._on_geolocation_show_prompt,
            EventType.GEOLOCATION_HIDE_PROMPT: self._on_geolocation_hide_prompt,
            EventType.CONSOLE_MESSAGE: self._on_console_message,
            EventType.OPEN_FILE_CHOOSER: self._open_file_chooser,
            EventType.GET_VISITED_HISTORY: self._get_visited_history,
        }

    # === 진입점 ===

    def post(self, event: Event):
        """엔진 스레드에서 호출: 조정 컨텍스트에서 처리하도록 예약"""
        self.tab.control.task_runner.schedule_task(Task(self.handle, event))

    def handle(self, event: Event) -> Any:
        if not self._accepts(event):
            trace_instant("event_ignored", "event", {"type": event.type.name, "tab": self.tab.id})
            self._decline(event)
            return False
        handler = self._handlers.get(event.type)
        if handler is None:
            return None
        return handler(event)

    def _accepts(self, event: Event) -> bool:
        tab = self.tab
        if not tab.is_live:
            return False
        view = event.view
        return view is None or view is tab.web_view or view is tab.sub_web_view

    def _decline(self, event: Event):
        # 응답을 기다리는 요청은 취소로 마무리
        handler = event.get("handler")
        if handler is not None:
            handler.cancel()
        for key in ("cancel_msg", "dont_resend"):
            msg = event.get(key)
            if msg is not None:
                msg()
        callback = event.get("callback")
        if event.type is EventType.OPEN_FILE_CHOOSER and callback is not None:
            callback(None)

    @property
    def _host(self):
        return self.tab.host

    @property
    def _in_foreground(self) -> bool:
        return self.tab.in_foreground

    # === 페이지 로드 ===

    def _on_page_started(self, event: Event):
        tab = self.tab
        view, url, favicon = event.view, event.get("url"), event.get("favicon")
        tab._in_load = True
        tab.reset_lock_icon(url)

        # 새 페이지의 스크린샷이 이전 페이지 이름으로 저장되지 않도록 예약 취소
        self._host.cancel_thumbnail_update(view)

        # 진행 중인 터치 아이콘 다운로드는 취소하지 않고 떼어냄
        tab.touch_icons.on_page_started()

        console = tab.get_error_console(False)
        if console is not None:
            console.clear_error_messages()
            if tab.control.settings.show_error_console:
                console.show_console(ConsoleShowState.NONE)

        if favicon is not None and view is not None:
            self._update_favicon(view, favicon)

        # 로딩 중 쿠키 동기화가 시작되지 않도록
        cookie_sync = tab.control.cookie_sync
        if cookie_sync is not None:
            cookie_sync.reset_sync()

        if view is not None and not self._host.is_network_up():
            view.set_network_available(False)

        if self._in_foreground:
            self._host.on_page_started(view, url, favicon)

    def _on_page_finished(self, event: Event):
        tab = self.tab
        tab._in_load = False

        # 사용자가 로드를 중간에 멈춘 경우가 아니면 썸네일 갱신
        if not self._in_foreground or not self._host.did_user_stop_loading():
            self._host.schedule_thumbnail_update(event.view)

        if self._in_foreground:
            self._host.on_page_finished(event.view, event.get("url"))

    def _should_override_url_loading(self, event: Event) -> bool:
        if self._in_foreground:
            return bool(self._host.should_override_url_loading(event.view, event.get("url")))
        return False

    def _on_load_resource(self, event: Event):
        # 아이콘은 로드가 끝날 때 반영되고, 여기서는 타입만 갱신
        self.tab._lock_icon.on_load_resource(event.get("url"))

    def _on_too_many_redirects(self, event: Event):
        cancel_msg, continue_msg = event.get("cancel_msg"), event.get("continue_msg")
        if not self._in_foreground:
            cancel_msg()
            return
        self._host.show_redirect_dialog(on_continue=continue_msg, on_cancel=cancel_msg)

    def _on_received_error(self, event: Event):
        tab = self.tab
        code, description = event.get("error_code"), event.get("description", "")
        failing_url = event.get("failing_url")
        if not tab.control.settings.is_suppressed(code):
            tab.error_queue.queue_error(code, description)
        log_error(LOGTAG, f"onReceivedError {code} {failing_url} {description}")

        if self._in_foreground:
            tab.revert_lock_icon()
            self._host.reset_title_and_revert_lock_icon()

    def _on_form_resubmission(self, event: Event):
        dont_resend, resend = event.get("dont_resend"), event.get("resend")
        if not self._in_foreground:
            dont_resend()
            return
        self._host.show_form_resubmission_dialog(on_resend=resend, on_dont_resend=dont_resend)

    def _do_update_visited_history(self, event: Event):
        url = event.get("url")
        if not url or url[:6].lower() == "about:":
            return
        url = strip_client_param(url)
        try:
            self.tab.control.bookmarks.record_visit(url)
        except BookmarksError as e:
            log_error(LOGTAG, f"could not record visit {url}: {e}")

    # === 보안 / 인증 ===

    def _on_received_ssl_error(self, event: Event):
        handler, error = event.get("handler"), event.get("error")
        if not self._in_foreground:
            handler.cancel()
            return
        if not self.tab.control.settings.show_security_warnings:
            handler.proceed()
            return

        def on_cancel():
            handler.cancel()
            self.tab.revert_lock_icon()
            self._host.reset_title_and_revert_lock_icon()

        self._host.show_ssl_warnings(event.view, handler, error, error.warnings(), on_cancel)

    def _on_received_http_auth_request(self, event: Event):
        handler, host, realm = event.get("handler"), event.get("host"), event.get("realm")
        credentials = None
        main_view = self.tab.web_view
        if handler.use_http_auth_username_password() and main_view is not None:
            credentials = main_view.get_http_auth_username_password(host, realm)

        if credentials is not None and len(credentials) == 2:
            handler.proceed(credentials[0], credentials[1])
        elif self._in_foreground:
            self._host.show_http_authentication(handler, host, realm)
        else:
            handler.cancel()

    # === 창 관리 ===

    def _create_window(self, dialog: bool, transport):
        tab = self.tab
        if dialog:
            tab.create_sub_window()
            self._host.attach_sub_window(tab)
            transport.set_web_view(tab.sub_web_view)
        else:
            new_tab = self._host.open_tab_and_show(EMPTY_URL, False, None)
            if new_tab is not None and new_tab is not tab:
                add_child_tab(tab, new_tab)
            transport.set_web_view(new_tab.web_view if new_tab is not None else None)
        transport.send_to_target()

    def _on_create_window(self, event: Event) -> bool:
        tab = self.tab
        dialog, user_gesture = bool(event.get("dialog")), bool(event.get("user_gesture"))
        transport = event.get("transport")

        # 포그라운드에서만 새 창/서브윈도우 허용
        if not self._in_foreground:
            return False
        if dialog and tab.sub_web_view is not None:
            self._host.show_too_many_windows_dialog(subwindow=True)
            return False
        if not tab.control.can_create_new_tab():
            self._host.show_too_many_windows_dialog(subwindow=False)
            return False

        if user_gesture:
            self._create_window(dialog, transport)
            return True

        # 사용자 동작 없이 열린 팝업은 확인 후 생성, 차단하면 뷰 없이 돌려줌
        self._host.show_popup_confirmation(
            on_allow=lambda: self._create_window(dialog, transport),
            on_block=transport.send_to_target,
        )
        return True

    def _on_request_focus(self, event: Event):
        if not self._in_foreground:
            self._host.switch_to_tab(self.tab.control.get_tab_index(self.tab))

    def _on_close_window(self, event: Event):
        tab = self.tab
        parent = tab.parent_tab
        # 스크립트는 자신이 연 팝업 탭만 닫을 수 있음
        if parent is None:
            return
        if self._in_foreground:
            self._host.switch_to_tab(tab.control.get_tab_index(parent))
        self._host.close_tab(tab)

    # === 진행률 / 제목 / 아이콘 ===

    def _on_progress_changed(self, event: Event):
        progress = event.get("progress", 0)
        if progress == 100:
            cookie_sync = self.tab.control.cookie_sync
            if cookie_sync is not None:
                cookie_sync.sync()
        if self._in_foreground:
            self._host.on_progress_changed(event.view, progress)

    def _on_received_title(self, event: Event):
        title = event.get("title")
        url = event.view.get_url() if event.view is not None else None
        if self._in_foreground:
            # url이 None이면 제목 초기화
            self._host.set_url_title(url, title)
        if url is None or len(url) >= SQLITE_MAX_LIKE_PATTERN_LENGTH:
            return
        try:
            self.tab.control.bookmarks.update_history_title(history_url_suffix(url), title)
        except BookmarksError as e:
            log_error(LOGTAG, f"onReceivedTitle: {e}")

    def _update_favicon(self, view, icon):
        try:
            self.tab.control.bookmarks.update_favicon(view.get_original_url(), view.get_url(), icon)
        except BookmarksError as e:
            log_error(LOGTAG, f"could not update favicon: {e}")

    def _on_received_icon(self, event: Event):
        icon = event.get("icon")
        if icon is not None and event.view is not None:
            self._update_favicon(event.view, icon)
        if self._in_foreground:
            self._host.set_favicon(icon)

    def _on_received_touch_icon_url(self, event: Event):
        view = event.view or self.tab.web_view
        try:
            return self.tab.touch_icons.on_touch_icon_url(
                view, event.get("url"), bool(event.get("precomposed")))
        except BookmarksError as e:
            log_error(LOGTAG, f"touch icon lookup failed: {e}")
            return False

    # === 기타 요청 ===

    def _on_geolocation_show_prompt(self, event: Event):
        if self._in_foreground:
            self.tab.geolocation_prompt.show(event.get("origin"), event.get("callback"))

    def _on_geolocation_hide_prompt(self, event: Event):
        if self._in_foreground:
            self.tab.geolocation_prompt.hide()

    def _on_console_message(self, event: Event):
        message, source_id = event.get("message"), event.get("source_id")
        line_number = event.get("line_number", 0)
        if self._in_foreground:
            console = self.tab.get_error_console(True)
            console.add_error_message(message, source_id, line_number)
            if (self.tab.control.settings.show_error_console
                    and console.show_state is not ConsoleShowState.MAXIMIZED):
                console.show_console(ConsoleShowState.MINIMIZED)
        log_warning(LOGTAG, "Console: {} {}:{}".format(message, source_id, line_number))

    def _open_file_chooser(self, event: Event):
        callback = event.get("callback")
        if self._in_foreground:
            self._host.open_file_chooser(callback)
        else:
            callback(None)

    def _get_visited_history(self, event: Event):
        """방문 기록 조회는 워커에서, 결과 전달은 조정 컨텍스트에서"""
        control = self.tab.control
        callback = event.get("callback")

        def on_loaded(response: IOResponse):
            result = response.result if not response.error else []
            if response.error:
                log_info(LOGTAG, f"visited history unavailable: {response.error}")
            control.task_runner.schedule_task(Task(callback, result))

        control.io_thread.request(
            control.bookmarks.get_visited_history,
            request_type=RequestType.HISTORY_QUERY,
            callback=on_loaded,
        )


class SubWindowClient:
    """서브윈도우 뷰의 이벤트를 메인 핸들러로 넘김"""

    FORWARDED = frozenset({
        EventType.UPDATE_VISITED_HISTORY,
        EventType.OVERRIDE_URL_LOADING,
        EventType.SSL_ERROR,
        EventType.HTTP_AUTH_REQUEST,
        EventType.FORM_RESUBMISSION,
        EventType.RECEIVED_ERROR,
        EventType.PROGRESS_CHANGED,
        EventType.CREATE_WINDOW,
    })

    def __init__(self, client: TabClient):
        self._client = client

    def post(self, event: Event):
        self._client.tab.control.task_runner.schedule_task(Task(self.handle, event))

    def handle(self, event: Event) -> Any:
        if event.type is EventType.CLOSE_WINDOW:
            return self._on_close_window(event)
        if event.type in self.FORWARDED:
            return self._client.handle(event)
        return None

    def _on_close_window(self, event: Event):
        tab = self._client.tab
        if not tab.is_live:
            return
        window = event.get("window", event.view)
        if window is not tab.sub_web_view:
            log_error(LOGTAG, "Can't close the window")
        tab.host.dismiss_sub_window(tab)
