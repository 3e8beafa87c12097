"""User-visible notifications (title, description, severity) collected per request"""

from dataclasses import dataclass
from enum import Enum
from typing import List


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Notification:
    title: str
    description: str
    severity: Severity = Severity.INFO


class Notifier:
    """Collects notifications raised while serving one request"""

    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def notify(self, title: str, description: str, severity: Severity = Severity.INFO) -> Notification:
        notification = Notification(title=title, description=description, severity=severity)
        self.notifications.append(notification)
        return notification

    def success(self, title: str, description: str) -> Notification:
        return self.notify(title, description, Severity.SUCCESS)

    def error(self, title: str, error: BaseException | str) -> Notification:
        description = str(error) if str(error) else "An unexpected error occurred"
        return self.notify(title, description, Severity.ERROR)
