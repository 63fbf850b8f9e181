"""
Tab - 브라우징 세션 하나의 생명주기 관리

Tab은 다음을 담당합니다:
- 메인 뷰와 서브윈도우(팝업) 뷰의 소유 및 교체
- 포그라운드/백그라운드 전환 시 resume/pause 전달
- 메모리 부족 시 상태 저장 후 뷰 해제(freeze), 다시 살리기(thaw)
- 스크립트로 열린 탭들 사이의 부모/자식 관계
- 에러 다이얼로그 큐, 콘솔 메시지, 터치 아이콘 다운로드 조정
- 탭 선택 화면용 url/title/favicon, 보안 표시 상태

상태 변경은 모두 조정 컨텍스트(TaskRunner)에서 일어난다고 가정합니다.
"""
import itertools
import weakref
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, List, Optional

from ..profiling import MeasureTime, log_info, log_warning
from .error_console import ErrorConsole
from .error_queue import ErrorQueue
from .lock_icon import LockIcon, LockIconState
from .picker_data import PickerData
from .saved_state import SavedState, deserialize, serialize
from .tab_client import SubWindowClient, TabClient
from .tab_tree import add_child_tab, remove_from_tree, set_parent_tab
from .touch_icon import TouchIconCoordinator
from .view_container import GeolocationPermissionsPrompt, ViewContainer

if TYPE_CHECKING:
    from ..core.tab_control import TabControl
    from .interfaces import BrowserHost, WebView

LOGTAG = "Tab"

_tab_ids = itertools.count(1)


class TabState(Enum):
    BACKGROUND = auto()
    ACTIVE = auto()
    FROZEN = auto()      # 뷰 해제, 저장된 상태만 보관
    DESTROYED = auto()


class Tab:
    """
    탭 하나 (메인 뷰 + 서브윈도우)

    web_view가 None이면 메모리 부족으로 내려갔거나 아직 만들어지지 않은
    상태이며, saved_state에서 다시 복원할 수 있습니다.
    """
    def __init__(self, control: "TabControl", web_view: Optional["WebView"] = None,
                 close_on_exit: bool = False, app_id: Optional[str] = None,
                 url: Optional[str] = None):
        self.id = next(_tab_ids)
        self.control = control

        self.close_on_exit = close_on_exit
        self.app_id = app_id
        # url이 같으면 기존 뷰를 재사용하기 위해 보관
        self.original_url = url

        self._in_foreground = False
        self._in_load = False
        self._destroyed = False
        self._lock_icon = LockIconState()

        # 트리: 부모는 약한 참조, 자식은 소유
        self._parent_ref: Optional[weakref.ref] = None
        self._child_tabs: List["Tab"] = []

        self.saved_state: Optional[SavedState] = None
        self._picker_data: Optional[PickerData] = None

        self.error_queue = ErrorQueue(self)
        # 첫 콘솔 메시지가 올 때 생성
        self._error_console: Optional[ErrorConsole] = None
        self.touch_icons = TouchIconCoordinator(self)
        self.client = TabClient(self)
        self.sub_client = SubWindowClient(self.client)

        # 메인 뷰를 감싸는 컨테이너 (탭의 다른 UI 요소 포함)
        self.container = ViewContainer(f"tab-{self.id}")
        self.geolocation_prompt = GeolocationPermissionsPrompt()

        self._web_view: Optional["WebView"] = None
        self._sub_web_view: Optional["WebView"] = None
        self.set_web_view(web_view)

    def __repr__(self):
        return f"Tab({self.id}, {self.state.name}, url={self.url!r})"

    # === 속성 ===

    @property
    def host(self) -> "BrowserHost":
        return self.control.host

    @property
    def web_view(self) -> Optional["WebView"]:
        """메인 뷰. 백그라운드에서 메모리 부족으로 해제되면 None"""
        return self._web_view

    @property
    def sub_web_view(self) -> Optional["WebView"]:
        return self._sub_web_view

    def get_top_window(self) -> Optional["WebView"]:
        """서브윈도우가 있으면 서브윈도우, 아니면 메인 뷰"""
        if self._sub_web_view is not None:
            return self._sub_web_view
        return self._web_view

    @property
    def state(self) -> TabState:
        if self._destroyed:
            return TabState.DESTROYED
        if self._web_view is None:
            return TabState.FROZEN
        return TabState.ACTIVE if self._in_foreground else TabState.BACKGROUND

    @property
    def is_live(self) -> bool:
        """엔진 이벤트를 처리할 수 있는 상태인지"""
        return not self._destroyed and self._web_view is not None

    @property
    def in_foreground(self) -> bool:
        return self._in_foreground

    @property
    def in_load(self) -> bool:
        """PAGE_STARTED 이후 PAGE_FINISHED 전까지 True"""
        return self._in_load

    def clear_in_load(self):
        # 탭을 닫기 직전에만 사용
        self._in_load = False

    @property
    def lock_icon_type(self) -> LockIcon:
        return self._lock_icon.current

    @property
    def previous_lock_icon_type(self) -> LockIcon:
        return self._lock_icon.previous

    def reset_lock_icon(self, url: Optional[str]):
        """현재 보안 상태를 저장한 뒤 초기화 (에러 시 revert로 되돌림)"""
        self._lock_icon.reset(url)

    def revert_lock_icon(self):
        self._lock_icon.revert()

    # === 트리 ===

    @property
    def parent_tab(self) -> Optional["Tab"]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def _set_parent_ref(self, parent: Optional["Tab"]):
        self._parent_ref = weakref.ref(parent) if parent is not None else None

    @property
    def child_tabs(self) -> List["Tab"]:
        return list(self._child_tabs)

    def set_parent_tab(self, parent: Optional["Tab"]):
        set_parent_tab(self, parent)

    def add_child_tab(self, child: "Tab") -> bool:
        return add_child_tab(self, child)

    def remove_from_tree(self):
        remove_from_tree(self)

    # === 콘솔 ===

    def get_error_console(self, create_if_necessary: bool = False) -> Optional[ErrorConsole]:
        if create_if_necessary and self._error_console is None:
            self._error_console = ErrorConsole()
        return self._error_console

    # === 탭 선택 화면 데이터 ===

    @property
    def url(self) -> Optional[str]:
        """populate_picker_data 이후 clear_picker_data 전까지 유효"""
        return self._picker_data.url if self._picker_data else None

    @property
    def title(self) -> Optional[str]:
        return self._picker_data.title if self._picker_data else None

    @property
    def favicon(self) -> Any:
        return self._picker_data.favicon if self._picker_data else None

    def populate_picker_data(self):
        if self._web_view is None:
            self.populate_picker_data_from_saved_state()
            return
        self._picker_data = PickerData.from_item(self._web_view.current_item())

    def populate_picker_data_from_saved_state(self):
        if self.saved_state is None:
            return
        self._picker_data = PickerData(url=self.saved_state.url, title=self.saved_state.title)

    def clear_picker_data(self):
        self._picker_data = None

    # === 뷰 교체 ===

    def set_web_view(self, w: Optional["WebView"]):
        """메인 뷰 교체. 기존 뷰는 컨테이너에서 떼어내기만 하고 파괴하지 않음"""
        if self._web_view is w:
            return
        # 뷰가 바뀌면 페이지가 다시 로드되므로 진행 중인 위치 권한 요청은 무효
        self.geolocation_prompt.hide()

        old = self._web_view
        if old is not None:
            self.container.remove_view(old)
            old.set_client(None)

        self._web_view = w
        if w is not None:
            w.set_client(self.client)

    # === 서브윈도우 ===

    def create_sub_window(self) -> bool:
        """서브윈도우가 없으면 생성. 새로 만들었으면 True"""
        if self._sub_web_view is not None:
            return False
        view = self.control.create_web_view()
        view.set_client(self.sub_client)
        if self._in_foreground:
            view.set_context_menu_listener(self.host.context_menu_listener)
        self._sub_web_view = view
        return True

    def dismiss_sub_window(self):
        if self._sub_web_view is None:
            return
        view = self._sub_web_view
        self._sub_web_view = None
        view.set_client(None)
        self.control.release_web_view(view)

    def attach_sub_window(self, content: ViewContainer):
        if self._sub_web_view is not None:
            content.add_view(self._sub_web_view)

    def remove_sub_window(self, content: ViewContainer):
        if self._sub_web_view is not None:
            content.remove_view(self._sub_web_view)

    def attach_tab_to_content_view(self, content: ViewContainer):
        """메인 뷰를 컨테이너에, 컨테이너와 서브윈도우를 content에 부착"""
        if self._web_view is None:
            return
        self.container.add_view(self._web_view)
        content.add_view(self.container)
        self.attach_sub_window(content)

    def remove_tab_from_content_view(self, content: ViewContainer):
        if self._web_view is None:
            return
        self.container.remove_view(self._web_view)
        content.remove_view(self.container)
        self.remove_sub_window(content)

    # === 포그라운드 / 백그라운드 ===

    def resume(self):
        if self._web_view is not None:
            self._web_view.on_resume()
            if self._sub_web_view is not None:
                self._sub_web_view.on_resume()

    def pause(self):
        if self._web_view is not None:
            self._web_view.on_pause()
            if self._sub_web_view is not None:
                self._sub_web_view.on_pause()

    def put_in_foreground(self):
        if self._destroyed:
            return
        self._in_foreground = True
        self.resume()
        listener = self.host.context_menu_listener
        for view in (self._web_view, self._sub_web_view):
            if view is not None:
                view.set_context_menu_listener(listener)
        # 쌓여 있던 에러 다이얼로그 표시
        self.error_queue.show_pending()

    def put_in_background(self):
        if self._destroyed:
            return
        self._in_foreground = False
        self.pause()
        for view in (self._web_view, self._sub_web_view):
            if view is not None:
                view.set_context_menu_listener(None)

    # === 저장 / 복원 ===

    def save_state(self) -> bool:
        """
        상태 저장. 뷰가 이미 없으면 이전에 저장한 상태가 있는지만 확인
        """
        return serialize(self) is not None

    def restore_state(self, state: Optional[SavedState]) -> bool:
        return deserialize(state, self)

    def freeze(self) -> bool:
        """메모리 확보: 상태를 저장하고 뷰와 서브윈도우를 해제"""
        if self._destroyed:
            return False
        if self._web_view is None:
            return self.saved_state is not None

        with MeasureTime("freeze", "lifecycle", {"tab": self.id}):
            if not self.save_state():
                return False
            self._release_views()
        log_info(LOGTAG, f"tab {self.id} frozen")
        return True

    def thaw(self, web_view: "WebView") -> bool:
        """
        새 뷰를 붙이고 저장된 상태로 복원. 실패해도 탭의 정적 정보는 유지

        이미 뷰가 있는 탭에는 아무것도 하지 않고 False. 넘겨받은 뷰는
        호출한 쪽이 해제해야 합니다.
        """
        if self._destroyed:
            return False
        if self._web_view is not None:
            log_warning(LOGTAG, f"tab {self.id} already has a view, not thawing")
            return False
        with MeasureTime("thaw", "lifecycle", {"tab": self.id}):
            state = self.saved_state
            self.set_web_view(web_view)
            if self._in_foreground:
                web_view.set_context_menu_listener(self.host.context_menu_listener)
            else:
                web_view.on_pause()
            ok = self.restore_state(state)
        if not ok:
            log_warning(LOGTAG, f"tab {self.id} could not restore its history")
        return ok

    # === 파괴 ===

    def _release_views(self):
        self.dismiss_sub_window()
        view = self._web_view
        if view is None:
            return
        # 컨테이너에서 먼저 떼어낸 뒤 파괴
        self.set_web_view(None)
        self.control.release_web_view(view)

    def destroy(self):
        """뷰/서브윈도우 해제, 아이콘 다운로드 취소, 트리에서 제거. 두 번 불러도 무방"""
        if self._destroyed:
            return
        self.touch_icons.cancel()
        self._release_views()
        self.remove_from_tree()
        self.error_queue.clear()
        self.geolocation_prompt.hide()
        self._in_foreground = False
        self._in_load = False
        self._destroyed = True
