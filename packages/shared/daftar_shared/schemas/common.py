from enum import Enum

class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"

# Order used by the status badge click-through
TASK_STATUS_CYCLE: list["TaskStatus"] = [
    TaskStatus.PENDING,
    TaskStatus.IN_PROGRESS,
    TaskStatus.COMPLETED,
    TaskStatus.BLOCKED,
]

TASK_STATUS_LABELS: dict["TaskStatus", str] = {
    TaskStatus.PENDING: "شروع نشده",
    TaskStatus.IN_PROGRESS: "در حال انجام",
    TaskStatus.COMPLETED: "تکمیل شده",
    TaskStatus.BLOCKED: "متوقف شده",
}

class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"

class ProjectCategory(str, Enum):
    WEB = "web"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    OTHER = "other"

PROJECT_CATEGORY_LABELS: dict["ProjectCategory", str] = {
    ProjectCategory.WEB: "وب‌سایت",
    ProjectCategory.INSTAGRAM: "اینستاگرام",
    ProjectCategory.YOUTUBE: "یوتیوب",
    ProjectCategory.OTHER: "سایر",
}

class Role(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"

# Stages created for a project that is not based on an existing process
DEFAULT_STAGE_TITLES: list[str] = ["انجام نشده", "در حال انجام", "انجام شده"]

DEFAULT_TASK_TITLE = "تسک جدید"
UNKNOWN_STAGE_TITLE = "سایر"
NO_STAGE_TITLE = "بدون مرحله"
