"""보안 표시(자물쇠 아이콘) 상태"""
from enum import Enum, auto
from typing import Optional

_SAFE_RESOURCE_PREFIXES = ("https://", "data:", "about:")


class LockIcon(Enum):
    UNSECURE = auto()
    SECURE = auto()
    MIXED = auto()


def is_https_url(url: Optional[str]) -> bool:
    return bool(url) and url[:8].lower() == "https://"


class LockIconState:
    """현재 상태와 되돌리기용 이전 상태 한 칸"""

    def __init__(self):
        self.current = LockIcon.UNSECURE
        self.previous = LockIcon.UNSECURE

    def reset(self, url: Optional[str]):
        """새 로드 시작 전 현재 상태를 저장하고 url 기준으로 재설정"""
        self.previous = self.current
        self.current = LockIcon.SECURE if is_https_url(url) else LockIcon.UNSECURE

    def revert(self):
        """에러/취소 시 직전 상태로 복구"""
        self.current = self.previous

    def on_load_resource(self, url: Optional[str]):
        # 보안 페이지가 안전하지 않은 리소스를 불러오면 mixed
        if not url:
            return
        if self.current is LockIcon.SECURE:
            if not url.lower().startswith(_SAFE_RESOURCE_PREFIXES):
                self.current = LockIcon.MIXED
