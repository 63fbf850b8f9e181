"""
TabControl - 탭 목록과 공유 자원 관리

호스트 창이 소유하는 탭 목록입니다.
- 탭 생성/제거, 현재 탭 전환
- 탭 목록 내 위치(인덱스)로 부모 관계 기록/복원
- 메모리 부족 시 오래 쓰지 않은 백그라운드 탭 freeze
- 전체 탭 상태 저장/복원 (프로세스 재시작 대비)
- 뷰 생성/파괴 시 설정 레지스트리 등록/해제를 짝지어 처리
"""
import json
import os
import tempfile
from typing import Any, Callable, Dict, List, Optional

from ..common.constants import MAX_TABS, PICTURE_IO_MAX_WORKERS
from ..content import BrowserSettings, SavedState, Tab
from ..content.saved_state import PARENTTAB
from ..content.interfaces import BookmarksStore, BrowserHost, CookieSync, WebView
from ..profiling import MeasureTime, log_info, log_warning
from ..rendering import PictureStore
from ..threads import IOThread, TaskRunner

LOGTAG = "TabControl"

# 저장 키
NUMTABS = "numTabs"
CURRTAB = "currentTab"
TABS = "tabs"


def _no_icon_fetch(url: str) -> bytes:
    raise RuntimeError(f"no icon fetcher configured for {url}")


class TabControl:
    def __init__(
        self,
        host: BrowserHost,
        web_view_factory: Callable[[], WebView],
        bookmarks: BookmarksStore,
        settings: Optional[BrowserSettings] = None,
        thumbnail_dir: Optional[str] = None,
        cookie_sync: Optional[CookieSync] = None,
        fetch_icon: Optional[Callable[[str], bytes]] = None,
        task_runner: Optional[TaskRunner] = None,
        io_thread: Optional[IOThread] = None,
        picture_io: Optional[IOThread] = None,
        max_tabs: int = MAX_TABS,
    ):
        self.host = host
        self.bookmarks = bookmarks
        self.settings = settings or BrowserSettings()
        self.cookie_sync = cookie_sync
        self.fetch_icon = fetch_icon or _no_icon_fetch
        self.task_runner = task_runner or TaskRunner()
        self.io_thread = io_thread or IOThread()
        self.picture_io = picture_io or IOThread(PICTURE_IO_MAX_WORKERS, name="PictureIO")
        self.max_tabs = max_tabs

        self.thumbnail_dir = thumbnail_dir or os.path.join(tempfile.gettempdir(), "browser_tabs_thumbnails")
        self.picture_store = PictureStore(self.thumbnail_dir)

        self._web_view_factory = web_view_factory
        self.tabs: List[Tab] = []
        self.current_tab: Optional[Tab] = None

        # 최근 사용 순서 (앞쪽이 오래된 탭)
        self._usage: List[Tab] = []

    # === 뷰 생성 / 해제 ===

    def create_web_view(self) -> WebView:
        """새 뷰 생성 후 설정 레지스트리에 등록"""
        view = self._web_view_factory()
        self.settings.add_observer(view.settings)
        return view

    def release_web_view(self, view: WebView):
        """설정 레지스트리에서 해제 후 뷰 파괴"""
        self.settings.delete_observer(view.settings)
        view.destroy()

    # === 조회 ===

    def get_tab_count(self) -> int:
        return len(self.tabs)

    def get_tab(self, index: int) -> Optional[Tab]:
        if 0 <= index < len(self.tabs):
            return self.tabs[index]
        return None

    def get_tab_index(self, tab: Optional[Tab]) -> int:
        """탭 위치. 목록에 없으면 -1"""
        for i, t in enumerate(self.tabs):
            if t is tab:
                return i
        return -1

    def get_current_tab(self) -> Optional[Tab]:
        return self.current_tab

    def get_current_index(self) -> int:
        return self.get_tab_index(self.current_tab)

    def can_create_new_tab(self) -> bool:
        return len(self.tabs) < self.max_tabs

    def find_tab_with_app_id(self, app_id: Optional[str]) -> Optional[Tab]:
        """다른 앱이 재사용하려는 탭 찾기"""
        if app_id is None:
            return None
        for tab in self.tabs:
            if tab.app_id == app_id:
                return tab
        return None

    # === 생성 / 제거 ===

    def create_new_tab(self, close_on_exit: bool = False, app_id: Optional[str] = None,
                       url: Optional[str] = None) -> Optional[Tab]:
        if not self.can_create_new_tab():
            log_warning(LOGTAG, f"tab limit {self.max_tabs} reached")
            return None
        tab = Tab(self, self.create_web_view(), close_on_exit, app_id, url)
        self.tabs.append(tab)
        # 새 탭은 백그라운드 상태로 시작
        tab.put_in_background()
        if url:
            tab.web_view.load_url(url)
        return tab

    def remove_tab(self, tab: Tab) -> bool:
        index = self.get_tab_index(tab)
        if index < 0:
            return False

        if self.current_tab is tab:
            tab.put_in_background()
            self.current_tab = None

        tab.destroy()
        del self.tabs[index]
        self._usage = [t for t in self._usage if t is not tab]

        # 탭 위치가 바뀌었으므로 내려가 있는 탭들의 부모 인덱스 갱신
        for t in self.tabs:
            if t.saved_state is not None:
                t.set_parent_tab(t.parent_tab)
        return True

    # === 현재 탭 전환 ===

    def set_current_tab(self, tab: Optional[Tab]) -> bool:
        if tab is None or self.get_tab_index(tab) < 0:
            return False
        if self.current_tab is tab and tab.in_foreground:
            return True

        if self.current_tab is not None and self.current_tab is not tab:
            self.current_tab.put_in_background()

        self.current_tab = tab
        self._usage = [t for t in self._usage if t is not tab] + [tab]

        if tab.web_view is None:
            if not tab.thaw(self.create_web_view()):
                log_warning(LOGTAG, f"tab {tab.id} thawed without history")

        tab.put_in_foreground()
        return True

    # === 메모리 확보 ===

    def _freeable_tabs(self) -> List[Tab]:
        current = self.current_tab
        related = set()
        if current is not None:
            related.add(id(current))
            if current.parent_tab is not None:
                related.add(id(current.parent_tab))
            related.update(id(c) for c in current.child_tabs)

        used = [t for t in self._usage if t in self.tabs]
        never_used = [t for t in self.tabs if all(t is not u for u in used)]
        candidates = never_used + used
        return [t for t in candidates
                if t.web_view is not None and id(t) not in related]

    @MeasureTime.trace("free_memory", "lifecycle")
    def free_memory(self) -> Optional[Tab]:
        """가장 오래 쓰지 않은 백그라운드 탭 하나를 freeze"""
        for tab in self._freeable_tabs():
            if tab.freeze():
                log_info(LOGTAG, f"freed tab {tab.id}")
                return tab
        return None

    # === 전체 저장 / 복원 ===

    def save_state(self) -> Dict[str, Any]:
        """
        모든 탭 상태 저장. 저장에 실패한 탭은 건너뜀

        건너뛴 탭이 있으면 위치가 당겨지므로 부모 인덱스는 저장된 목록
        기준으로 다시 계산합니다. 부모가 빠졌으면 인덱스도 뺍니다.
        """
        with MeasureTime("save_all_tabs", "snapshot"):
            saved_tabs: List[Tab] = []
            for tab in self.tabs:
                if not tab.save_state():
                    log_warning(LOGTAG, f"could not save tab {tab.id}")
                    continue
                saved_tabs.append(tab)

            positions = {id(tab): i for i, tab in enumerate(saved_tabs)}
            saved = []
            for tab in saved_tabs:
                data = tab.saved_state.to_dict()
                data.pop(PARENTTAB, None)
                parent = tab.parent_tab
                if parent is not None and id(parent) in positions:
                    data[PARENTTAB] = positions[id(parent)]
                saved.append(data)
            current_index = positions.get(id(self.current_tab), -1)
        return {NUMTABS: len(saved), CURRTAB: current_index, TABS: saved}

    def restore_state(self, in_state: Optional[Dict[str, Any]]) -> bool:
        """
        저장된 탭 목록 복원

        탭은 모두 내려간 상태로 만들어지고, set_current_tab에서 실제로
        살아납니다. 부모 인덱스는 새 목록 기준으로 다시 검증합니다.
        """
        if not in_state:
            return False
        entries = in_state.get(TABS) or []
        count = min(int(in_state.get(NUMTABS, len(entries))), len(entries))
        if count == 0:
            return False

        with MeasureTime("restore_all_tabs", "snapshot"):
            restored: List[Tab] = []
            for data in entries[:count]:
                if len(self.tabs) >= self.max_tabs:
                    break
                state = SavedState.from_dict(data)
                tab = Tab(self, None, state.close_on_exit, state.app_id, state.original_url)
                tab.saved_state = state
                tab.populate_picker_data_from_saved_state()
                self.tabs.append(tab)
                restored.append(tab)

            for i, tab in enumerate(restored):
                index = tab.saved_state.parent_index
                if index is None:
                    continue
                if 0 <= index < len(restored) and index != i and restored[index].add_child_tab(tab):
                    continue
                log_warning(LOGTAG, f"dropping stale parent index {index} for tab {tab.id}")
                tab.set_parent_tab(None)

        current = in_state.get(CURRTAB, -1)
        if 0 <= current < len(restored):
            self.current_tab = restored[current]
        return True

    def save_to_file(self, path: str):
        data = self.save_state()
        with open(path, "w") as f:
            json.dump(data, f)

    def restore_from_file(self, path: str) -> bool:
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            log_warning(LOGTAG, f"could not read saved tabs {path}: {e}")
            return False
        return self.restore_state(data)

    # === 종료 ===

    def destroy(self):
        for tab in list(self.tabs):
            tab.destroy()
        self.tabs = []
        self._usage = []
        self.current_tab = None
        self.io_thread.stop()
        self.picture_io.stop()
