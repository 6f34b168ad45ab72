# SQLModel definitions - imported here to ensure metadata is populated for Alembic.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .profile import Profile  # noqa: F401
from .client import Client  # noqa: F401
from .process import Process, Stage, StageChecklist  # noqa: F401
from .project import Project  # noqa: F401
from .task import ProjectTask, TaskComment  # noqa: F401
from .event import Event  # noqa: F401
