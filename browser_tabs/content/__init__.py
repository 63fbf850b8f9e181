# Content layer - Tab and everything a single tab owns
from .events import Event, EventType, WindowTransport
from .interfaces import (
    WebView,
    BrowserHost,
    BookmarksStore,
    CookieSync,
    SslErrorHandler,
    HttpAuthHandler,
)
from .settings import BrowserSettings
from .picker_data import PickerData, HistoryItem
from .lock_icon import LockIcon, LockIconState
from .error_queue import ErrorQueue, ErrorDialog
from .error_console import ErrorConsole, ConsoleMessage, ConsoleShowState
from .touch_icon import TouchIconCoordinator, DownloadTouchIcon
from .saved_state import SavedState, serialize, deserialize
from .view_container import ViewContainer, GeolocationPermissionsPrompt
from .tab_client import TabClient, SubWindowClient
from .tab import Tab, TabState

__all__ = [
    'Event', 'EventType', 'WindowTransport',
    'WebView', 'BrowserHost', 'BookmarksStore', 'CookieSync',
    'SslErrorHandler', 'HttpAuthHandler',
    'BrowserSettings',
    'PickerData', 'HistoryItem',
    'LockIcon', 'LockIconState',
    'ErrorQueue', 'ErrorDialog',
    'ErrorConsole', 'ConsoleMessage', 'ConsoleShowState',
    'TouchIconCoordinator', 'DownloadTouchIcon',
    'SavedState', 'serialize', 'deserialize',
    'ViewContainer', 'GeolocationPermissionsPrompt',
    'TabClient', 'SubWindowClient',
    'Tab', 'TabState',
]
