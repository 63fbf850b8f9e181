"""
뷰 부착 상태와 위치 권한 프롬프트

픽셀을 그리지는 않고, 어떤 뷰가 어떤 컨테이너에 붙어 있는지만
기록합니다.
"""
from typing import Any, Callable, List, Optional


class ViewContainer:
    def __init__(self, name: str = "container"):
        self.name = name
        self.children: List[Any] = []

    def add_view(self, view: Any):
        if view is None or self.contains(view):
            return
        self.children.append(view)

    def remove_view(self, view: Any):
        self.children = [v for v in self.children if v is not view]

    def contains(self, view: Any) -> bool:
        return any(v is view for v in self.children)

    def __len__(self):
        return len(self.children)

    def __repr__(self):
        return f"ViewContainer({self.name}, {len(self.children)} views)"


class GeolocationPermissionsPrompt:
    """특정 뷰의 위치 권한 요청 하나를 보관"""

    def __init__(self):
        self.origin: Optional[str] = None
        self.callback: Optional[Callable[[str, bool, bool], None]] = None

    @property
    def visible(self) -> bool:
        return self.origin is not None

    def show(self, origin: str, callback: Callable[[str, bool, bool], None]):
        self.origin = origin
        self.callback = callback

    def hide(self):
        self.origin = None
        self.callback = None

    def respond(self, allow: bool, remember: bool = False):
        """사용자 선택을 엔진에 전달하고 프롬프트를 닫음"""
        if not self.visible:
            return
        origin, callback = self.origin, self.callback
        self.hide()
        callback(origin, allow, remember)
