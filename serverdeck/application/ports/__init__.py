from .dialogs import HostDialogsPort
from .tasks import TaskRunnerPort

__all__ = ["HostDialogsPort", "TaskRunnerPort"]
