"""
탭 상태 저장/복원

메모리 부족으로 뷰를 내릴 때, 또는 프로세스 재시작에 대비해
탭 상태를 SavedState로 저장합니다.

- 히스토리는 필수: 복원에 실패하면 False
- 스크린샷은 부가 정보: 저장/로드 실패는 전체 결과에 영향 없음
- close_on_exit / app_id / original_url 은 히스토리 복원이 실패해도 반드시 적용
- 스크린샷 파일 쓰기/읽기는 picture_io 워커에서 하고, 결과는 TaskRunner로 돌아와 적용
"""
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

from ..profiling import MeasureTime, log_warning
from ..threads import IOResponse, RequestType, Task
from .picker_data import PickerData

if TYPE_CHECKING:
    from .tab import Tab

LOGTAG = "SavedState"

# 저장 레이아웃 키
HISTORY = "history"
CURRPICTURE = "pictureFilePath"
CURRURL = "url"
CURRTITLE = "title"
CLOSEONEXIT = "closeOnExit"
APPID = "appId"
ORIGINALURL = "originalUrl"
PARENTTAB = "parentIndex"


@dataclass
class SavedState:
    history: Any = None
    picture_file_path: Optional[str] = None
    url: Optional[str] = None
    title: Optional[str] = None
    close_on_exit: bool = False
    app_id: Optional[str] = None
    original_url: Optional[str] = None
    parent_index: Optional[int] = None
    # 쓰기가 진행 중인 스크린샷 경로 (저장 레이아웃에는 포함되지 않음)
    pending_picture_path: Optional[str] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """JSON으로 쓸 수 있는 dict (값이 없는 선택 필드는 생략)"""
        out: Dict[str, Any] = {HISTORY: self.history, CLOSEONEXIT: self.close_on_exit}
        optional = (
            (CURRPICTURE, self.picture_file_path),
            (CURRURL, self.url),
            (CURRTITLE, self.title),
            (APPID, self.app_id),
            (ORIGINALURL, self.original_url),
            (PARENTTAB, self.parent_index),
        )
        for key, value in optional:
            if value is not None:
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SavedState":
        parent_index = data.get(PARENTTAB)
        return cls(
            history=data.get(HISTORY),
            picture_file_path=data.get(CURRPICTURE),
            url=data.get(CURRURL),
            title=data.get(CURRTITLE),
            close_on_exit=bool(data.get(CLOSEONEXIT, False)),
            app_id=data.get(APPID),
            original_url=data.get(ORIGINALURL),
            parent_index=int(parent_index) if parent_index is not None else None,
        )


def _save_picture(tab: "Tab", view, state: SavedState):
    """스크린샷 파일 쓰기를 워커에 맡김. 경로는 쓰기가 성공한 뒤에만 state에 기록"""
    control = tab.control
    image = view.capture_picture()
    if image is None:
        return
    path = control.picture_store.path_for(hash(view))
    state.pending_picture_path = path

    def on_saved(response: IOResponse):
        control.task_runner.schedule_task(Task(_on_picture_saved, tab, state, path, response))

    control.picture_io.request(
        control.picture_store.save, image, path,
        request_type=RequestType.PICTURE_WRITE,
        callback=on_saved,
    )


def _on_picture_saved(tab: "Tab", state: SavedState, path: str, response: IOResponse):
    control = tab.control
    state.pending_picture_path = None
    if response.error or not response.result:
        log_warning(LOGTAG, f"screenshot not saved for tab {tab.id}: {response.error or 'write failed'}")
        return
    current = tab.saved_state
    if current is not state:
        # 쓰기가 끝나기 전에 복원되었거나 다시 저장됨.
        # 새 상태가 같은 경로에 쓰는 중이면 그대로 둠
        if current is not None and current.pending_picture_path == path:
            return
        control.picture_io.request(control.picture_store.delete, path,
                                   request_type=RequestType.PICTURE_DELETE)
        return
    state.picture_file_path = path


def serialize(tab: "Tab") -> Optional[SavedState]:
    """
    탭 상태를 SavedState로 저장하고 tab.saved_state에 보관

    뷰가 이미 없으면 (메모리 부족으로 내려간 상태) 기존 상태를 그대로 반환합니다.
    """
    view = tab.web_view
    if view is None:
        return tab.saved_state

    with MeasureTime("save_state", "snapshot", {"tab": tab.id}):
        state = SavedState()
        state.history = view.save_state()
        if state.history is not None:
            _save_picture(tab, view, state)

        # 탭 선택 화면용 정보
        item = view.current_item() if state.history is not None else None
        picker = PickerData.from_item(item)
        tab._picker_data = picker
        state.url = picker.url
        state.title = picker.title

        state.close_on_exit = tab.close_on_exit
        state.app_id = tab.app_id
        state.original_url = tab.original_url

        # 부모 관계는 탭 목록 인덱스로 기록
        parent = tab.parent_tab
        if parent is not None:
            index = tab.control.get_tab_index(parent)
            state.parent_index = index if index >= 0 else None

    tab.saved_state = state
    return state


def deserialize(state: Optional[SavedState], tab: "Tab") -> bool:
    """
    SavedState를 탭과 뷰에 복원

    정적 필드는 항상 적용하고, 엔진이 히스토리를 거부하면 False.
    """
    if state is None:
        return False

    with MeasureTime("restore_state", "snapshot", {"tab": tab.id}):
        # 뷰 복원이 실패해도 app id, original url, close-on-exit 은 유지
        tab.saved_state = None
        tab._picker_data = None
        tab.close_on_exit = state.close_on_exit
        tab.app_id = state.app_id
        tab.original_url = state.original_url

        view = tab.web_view
        if view is None or state.history is None:
            return False
        if not view.restore_state(state.history):
            log_warning(LOGTAG, f"engine rejected history for tab {tab.id}")
            return False

        if state.picture_file_path:
            _restore_picture(tab, view, state.picture_file_path)
    return True


def _restore_picture(tab: "Tab", view, path: str):
    """스크린샷 읽기(+삭제)를 워커에 맡기고, 결과는 조정 컨텍스트에서 뷰에 전달"""
    control = tab.control

    def on_loaded(response: IOResponse):
        control.task_runner.schedule_task(Task(_on_picture_loaded, tab, view, path, response))

    control.picture_io.request(
        control.picture_store.take, path,
        request_type=RequestType.PICTURE_READ,
        callback=on_loaded,
    )


def _on_picture_loaded(tab: "Tab", view, path: str, response: IOResponse):
    image = response.result
    if image is None:
        log_warning(LOGTAG, f"screenshot unavailable for tab {tab.id}: {response.error or path}")
        return
    # 그 사이 다시 내려갔거나 뷰가 바뀌었으면 버림
    if tab.web_view is not view:
        return
    view.restore_picture(image)
