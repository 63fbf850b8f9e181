"""
엔진 -> 탭 이벤트

엔진 뷰가 보고하는 모든 생명주기/요청 이벤트는 하나의 Event 값으로
탭의 단일 핸들러(TabClient.handle)에 전달됩니다.
"""
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .interfaces import WebView


class EventType(Enum):
    """엔진에서 탭으로 전달되는 이벤트 타입"""
    PAGE_STARTED = auto()            # url, favicon
    PAGE_FINISHED = auto()           # url
    OVERRIDE_URL_LOADING = auto()    # url -> bool
    LOAD_RESOURCE = auto()           # url
    TOO_MANY_REDIRECTS = auto()      # cancel_msg, continue_msg
    RECEIVED_ERROR = auto()          # error_code, description, failing_url
    FORM_RESUBMISSION = auto()       # dont_resend, resend
    UPDATE_VISITED_HISTORY = auto()  # url, is_reload
    SSL_ERROR = auto()               # handler, error
    HTTP_AUTH_REQUEST = auto()       # handler, host, realm
    CREATE_WINDOW = auto()           # dialog, user_gesture, transport -> bool
    REQUEST_FOCUS = auto()
    CLOSE_WINDOW = auto()            # window
    PROGRESS_CHANGED = auto()        # progress
    RECEIVED_TITLE = auto()          # title
    RECEIVED_ICON = auto()           # icon
    TOUCH_ICON_URL = auto()          # url, precomposed
    GEOLOCATION_SHOW_PROMPT = auto() # origin, callback
    GEOLOCATION_HIDE_PROMPT = auto()
    CONSOLE_MESSAGE = auto()         # message, line_number, source_id
    OPEN_FILE_CHOOSER = auto()       # callback
    GET_VISITED_HISTORY = auto()     # callback


class Event:
    """엔진 뷰에서 탭으로 전달되는 이벤트"""
    def __init__(self, event_type: EventType, view: Optional["WebView"] = None, **kwargs):
        self.type = event_type
        self.view = view
        self.data = kwargs

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __repr__(self):
        return f"Event({self.type.name}, {self.data!r})"


class WindowTransport:
    """
    CREATE_WINDOW 결과 전달용

    탭이 새 창으로 쓸 뷰를 정하면 set_web_view 후 send_to_target으로
    엔진에 돌려줍니다. 뷰 없이 보내면 팝업 차단입니다.
    """
    def __init__(self, on_result=None):
        self.web_view: Optional["WebView"] = None
        self.sent = False
        self._on_result = on_result

    def set_web_view(self, view: Optional["WebView"]):
        self.web_view = view

    def send_to_target(self):
        self.sent = True
        if self._on_result:
            self._on_result(self.web_view)
