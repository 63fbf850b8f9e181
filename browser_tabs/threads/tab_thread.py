"""
TabThread - TaskRunner를 구동하는 조정 스레드

엔진/워커 스레드에서 올라온 Task를 이 스레드에서 순차 실행하여
탭 상태 변경이 서로 겹치지 않도록 합니다.
"""
import threading
from typing import Callable, Optional

from .task import Task, TaskRunner
from ..profiling import MeasureTime, log_error, set_thread_name


class TabThread(threading.Thread):
    def __init__(self, task_runner: Optional[TaskRunner] = None, name: str = "TabThread"):
        super().__init__(daemon=True, name=name)
        self.task_runner = task_runner or TaskRunner()
        self.running = False
        self._stopped = threading.Event()

    def run(self):
        self.running = True
        set_thread_name(self.name)

        while self.running:
            if self.task_runner.wait_for_task(timeout=0.05):
                with MeasureTime("run_task", "coordination"):
                    try:
                        self.task_runner.run()
                    except Exception as e:
                        log_error(self.name, f"task failed: {e!r}")

        # 종료 직전까지 들어온 태스크는 마저 실행
        self.task_runner.run_pending()
        self._stopped.set()

    def post(self, fn: Callable, *args):
        """fn(*args)를 조정 스레드에서 실행하도록 예약"""
        self.task_runner.schedule_task(Task(fn, *args))

    def call(self, fn: Callable, *args, timeout: Optional[float] = None):
        """조정 스레드에서 실행하고 결과를 기다림"""
        done = threading.Event()
        outcome = {}

        def invoke():
            try:
                outcome["result"] = fn(*args)
            except Exception as e:
                outcome["error"] = e
            finally:
                done.set()

        self.post(invoke)
        if not done.wait(timeout):
            raise TimeoutError(f"{getattr(fn, '__name__', fn)} did not run in time")
        if "error" in outcome:
            raise outcome["error"]
        return outcome["result"]

    def stop(self, timeout: float = 1.0):
        self.running = False
        self.task_runner.schedule_task(Task(lambda: None))
        self._stopped.wait(timeout)
