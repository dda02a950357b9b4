from typing import Optional

from marketplace.models import Notification, NotificationKind


class NotificationOverlay:
    """Holds the single pending notification; a new one replaces it."""

    def __init__(self) -> None:
        self.current: Optional[Notification] = None

    def show(self, text: str, kind: NotificationKind) -> Notification:
        self.current = Notification(text=text, kind=kind)
        return self.current

    def success(self, text: str) -> Notification:
        return self.show(text, "success")

    def error(self, text: str) -> Notification:
        return self.show(text, "error")

    def dismiss(self) -> None:
        self.current = None
