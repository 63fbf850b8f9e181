"""
Task / TaskRunner - 탭 상태를 변경하는 단일 조정 컨텍스트

엔진 콜백, 아이콘 다운로드 완료, 호스트의 생명주기 전환은
모두 TaskRunner에 Task로 올라와 순서대로 하나씩 실행됩니다.
"""
import threading
from collections import deque
from typing import Deque, Optional


class Task:
    def __init__(self, task_code, *args):
        self.task_code = task_code
        self.args = args

    def run(self):
        result = self.task_code(*self.args)
        self.task_code = None
        self.args = None
        return result


class TaskRunner:
    def __init__(self):
        self.tasks: Deque[Task] = deque()
        self.condition = threading.Condition()

    def schedule_task(self, task: Task):
        """어느 스레드에서든 호출 가능"""
        with self.condition:
            self.tasks.append(task)
            self.condition.notify_all()

    def has_pending(self) -> bool:
        with self.condition:
            return bool(self.tasks)

    def wait_for_task(self, timeout: Optional[float] = None) -> bool:
        """태스크가 들어올 때까지 대기"""
        with self.condition:
            if not self.tasks:
                self.condition.wait(timeout)
            return bool(self.tasks)

    def run(self) -> bool:
        """대기 중인 태스크 하나 실행"""
        task = None
        with self.condition:
            if self.tasks:
                task = self.tasks.popleft()

        if task:
            task.run()
            return True
        return False

    def run_pending(self) -> int:
        """현재 큐가 빌 때까지 실행 (실행 중 추가된 태스크 포함)"""
        count = 0
        while self.run():
            count += 1
        return count
