from typing import Optional
from pydantic import BaseModel


class DashboardStats(BaseModel):
    today_tasks: int = 0
    delayed_tasks: int = 0
    in_progress_tasks: int = 0
    done_tasks: int = 0
    total_tasks: int = 0

    @property
    def todo_tasks(self) -> int:
        return self.total_tasks - self.done_tasks - self.in_progress_tasks

    @property
    def completion_percent(self) -> float:
        if self.total_tasks == 0:
            return 0.0
        return round(self.done_tasks / self.total_tasks * 100, 1)


class DashboardResponse(BaseModel):
    full_name: Optional[str] = None
    greeting: str
    today: str  # YYYY/MM/DD
    today_label: str
    today_tasks: int
    delayed_tasks: int
    in_progress_tasks: int
    done_tasks: int
    todo_tasks: int
    total_tasks: int
    completion_percent: float
