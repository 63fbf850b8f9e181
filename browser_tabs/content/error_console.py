"""
ErrorConsole - 탭별 자바스크립트 콘솔 메시지 모음

첫 메시지가 들어올 때 만들어지고, 새 페이지 로드가 시작되면 비워집니다.
설정에서 콘솔 표시가 켜져 있으면 메시지가 들어올 때 최소화 상태로 보입니다.
"""
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional


class ConsoleShowState(Enum):
    NONE = auto()
    MINIMIZED = auto()
    MAXIMIZED = auto()


@dataclass(frozen=True)
class ConsoleMessage:
    message: Optional[str]
    source_id: Optional[str]
    line_number: int


class ErrorConsole:
    def __init__(self):
        self.messages: List[ConsoleMessage] = []
        self.show_state = ConsoleShowState.NONE

    def add_error_message(self, message: Optional[str], source_id: Optional[str], line_number: int):
        self.messages.append(ConsoleMessage(message, source_id, line_number))

    def clear_error_messages(self):
        self.messages.clear()

    def show_console(self, state: ConsoleShowState):
        self.show_state = state

    def __len__(self):
        return len(self.messages)
