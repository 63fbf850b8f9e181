"""
탭 소유 트리

스크립트(window.open)로 만들어진 탭은 만든 탭의 자식이 됩니다.
- 부모는 약한 참조, 자식 목록은 부모가 소유
- 다른 부모로 옮기는 것은 지원하지 않음 (순환이 생길 수 없음)
- 트리에서 빠질 때 자식들의 부모 링크만 끊고 자식은 그대로 둠
"""
from typing import TYPE_CHECKING, Optional

from ..profiling import log_warning

if TYPE_CHECKING:
    from .tab import Tab

LOGTAG = "TabTree"


def set_parent_tab(tab: "Tab", parent: Optional["Tab"]):
    """
    부모 설정

    탭이 메모리 부족으로 내려가 있으면 저장된 상태의 부모 인덱스도
    함께 갱신합니다. 인덱스는 탭 목록 순서가 바뀌면 무효가 되므로
    복원할 때 다시 검증합니다.
    """
    tab._set_parent_ref(parent)
    saved = tab.saved_state
    if saved is None:
        return
    if parent is None:
        saved.parent_index = None
    else:
        index = tab.control.get_tab_index(parent)
        saved.parent_index = index if index >= 0 else None


def add_child_tab(parent: "Tab", child: "Tab") -> bool:
    """child를 parent의 자식으로 연결. 이미 다른 부모가 있으면 무시"""
    if child is parent:
        return False
    current = child.parent_tab
    if current is not None and current is not parent:
        log_warning(LOGTAG, f"tab {child.id} already has parent {current.id}, ignoring {parent.id}")
        return False
    # child가 parent의 조상이면 순환
    ancestor = parent.parent_tab
    while ancestor is not None:
        if ancestor is child:
            log_warning(LOGTAG, f"tab {child.id} is an ancestor of {parent.id}, ignoring")
            return False
        ancestor = ancestor.parent_tab
    if not any(c is child for c in parent._child_tabs):
        parent._child_tabs.append(child)
    set_parent_tab(child, parent)
    return True


def remove_from_tree(tab: "Tab"):
    """자식들의 부모 링크를 끊고, 부모의 자식 목록에서 자신을 제거"""
    for child in list(tab._child_tabs):
        set_parent_tab(child, None)
    tab._child_tabs.clear()

    parent = tab.parent_tab
    if parent is not None:
        parent._child_tabs[:] = [c for c in parent._child_tabs if c is not tab]
        set_parent_tab(tab, None)
