"""进度轮询的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from webp_batch.core.models import Phase


@dataclass(slots=True, frozen=True)
class ProgressUpdate:
    """批处理过程中某一时刻的进度快照，供界面定时轮询。"""

    total: int
    completed: int
    phase: Phase
    current_index: Optional[int] = None
    current_file: Optional[str] = None

    @property
    def fraction(self) -> float:
        if self.total == 0:
            return 0.0
        return self.completed / self.total
