from enum import Enum
from pydantic import BaseModel


class PomodoroMode(str, Enum):
    WORK = "work"
    BREAK = "break"


POMODORO_MODE_LABELS: dict["PomodoroMode", str] = {
    PomodoroMode.WORK: "تمرکز",
    PomodoroMode.BREAK: "استراحت",
}


class PomodoroState(BaseModel):
    mode: PomodoroMode
    label: str
    time_left: int  # seconds
    display: str  # MM:SS
    is_active: bool
