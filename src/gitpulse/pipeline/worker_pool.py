"""제한된 동시성 작업 실행기

인자 없는 작업 함수 목록을 최대 max_workers개까지 동시에 실행합니다.
한 작업의 실패는 해당 작업의 결과로만 기록되며 다른 작업을 취소하지 않습니다.
"""

import concurrent.futures
import logging
import time
from typing import Any, Callable, List, Optional, Sequence

from .task_outcome import TaskOutcome

logger = logging.getLogger(__name__)

Task = Callable[[], Any]


class BoundedWorkerPool:
    """동시 실행 수가 제한된 작업 실행기"""

    def __init__(self, max_workers: int):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers

    def run(
        self,
        tasks: Sequence[Task],
        on_complete: Optional[Callable[[TaskOutcome], None]] = None
    ) -> List[TaskOutcome]:
        """작업 목록 실행

        Args:
            tasks: 인자 없는 작업 함수 목록
            on_complete: 작업이 끝날 때마다 호출 스레드에서 실행되는 콜백

        Returns:
            List[TaskOutcome]: 입력 순서와 같은 순서의 작업 결과
        """
        if not tasks:
            return []

        logger.debug(f"작업 실행 시작: {len(tasks)}개 작업, 최대 {self.max_workers}개 워커")

        outcomes: List[Optional[TaskOutcome]] = [None] * len(tasks)
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_index = {
                executor.submit(self._execute, task, index): index
                for index, task in enumerate(tasks)
            }

            for future in concurrent.futures.as_completed(future_to_index):
                outcome = future.result()
                outcomes[outcome.index] = outcome
                if on_complete is not None:
                    on_complete(outcome)

        succeeded = sum(1 for o in outcomes if o is not None and o.success)
        logger.debug(f"작업 실행 완료: {succeeded}/{len(tasks)} 성공")
        return [o for o in outcomes if o is not None]

    @staticmethod
    def _execute(task: Task, index: int) -> TaskOutcome:
        """단일 작업 실행 (예외는 실패 결과로 변환)"""
        start_time = time.time()
        try:
            data = task()
            return TaskOutcome(
                success=True,
                data=data,
                index=index,
                execution_time=time.time() - start_time,
            )
        except Exception as e:
            return TaskOutcome(
                success=False,
                data=None,
                index=index,
                error=e,
                execution_time=time.time() - start_time,
            )
