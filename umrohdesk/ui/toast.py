"""Toast notification system"""
import html
from enum import Enum
from typing import Optional
from PySide6.QtWidgets import QLabel, QGraphicsOpacityEffect, QWidget, QFrame, QVBoxLayout
from PySide6.QtCore import Qt, QTimer, QPropertyAnimation, QEasingCurve, QPoint
from PySide6.QtGui import QFont


class ToastType(Enum):
    """Toast notification types"""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ToastWidget(QFrame):
    """Single toast: optional bold title over the message"""

    STYLES = {
        ToastType.INFO: {"bg": "#1f6feb", "border": "#388bfd", "icon": "ℹ"},
        ToastType.SUCCESS: {"bg": "#2e7d32", "border": "#43a047", "icon": "✓"},
        ToastType.WARNING: {"bg": "#b26a00", "border": "#f0ad4e", "icon": "⚠"},
        ToastType.ERROR: {"bg": "#b3261e", "border": "#d9534f", "icon": "✕"},
    }

    def __init__(
        self,
        parent: QWidget,
        message: str,
        toast_type: ToastType,
        duration: int,
        title: Optional[str] = None,
    ):
        super().__init__(parent)
        self.duration = duration
        self.toast_type = toast_type
        self.title = title
        self.message = message
        self._target_y = 0

        style_info = self.STYLES[toast_type]
        self.setStyleSheet(f"""
            QFrame {{
                background-color: {style_info["bg"]};
                color: white;
                border-radius: 10px;
                border: 2px solid {style_info["border"]};
            }}
        """)

        self.setWindowFlags(Qt.FramelessWindowHint | Qt.Tool | Qt.WindowStaysOnTopHint)
        self.setAttribute(Qt.WA_ShowWithoutActivating)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(14, 14, 22, 14)
        layout.setSpacing(0)

        self.label = QLabel(self._build_text(style_info["icon"]), self)
        self.label.setTextFormat(Qt.RichText)
        self.label.setAlignment(Qt.AlignLeft | Qt.AlignVCenter)
        self.label.setStyleSheet("border: none; background: transparent; color: white;")

        font = QFont()
        font.setPixelSize(13)
        font.setWeight(QFont.Medium)
        self.label.setFont(font)

        self.label.setMinimumWidth(250)
        self.label.setMaximumWidth(380)
        self.label.setWordWrap(True)

        layout.addWidget(self.label)
        self.adjustSize()

        self.opacity_effect = QGraphicsOpacityEffect(self)
        self.setGraphicsEffect(self.opacity_effect)
        self._y_anim = None

    def _build_text(self, icon: str) -> str:
        body = html.escape(self.message)
        if self.title:
            return f"{icon}  <b>{html.escape(self.title)}</b><br>{body}"
        return f"{icon}  {body}"

    def set_target_y(self, y: int):
        """Set target Y position with animation"""
        self._target_y = y
        current_pos = self.pos()

        if self._y_anim:
            self._y_anim.stop()

        self._y_anim = QPropertyAnimation(self, b"pos")
        self._y_anim.setDuration(300)
        self._y_anim.setStartValue(current_pos)
        self._y_anim.setEndValue(QPoint(current_pos.x(), y))
        self._y_anim.setEasingCurve(QEasingCurve.OutCubic)
        self._y_anim.start()

    def show_animated(self):
        """Show with fade-in, hide after duration"""
        self.show()

        self.fade_in = QPropertyAnimation(self.opacity_effect, b"opacity")
        self.fade_in.setDuration(350)
        self.fade_in.setStartValue(0.0)
        self.fade_in.setEndValue(1.0)
        self.fade_in.setEasingCurve(QEasingCurve.OutCubic)
        self.fade_in.start()

        QTimer.singleShot(self.duration, self.hide_animated)

    def mousePressEvent(self, event):
        """Click dismisses the toast early"""
        self.hide_animated()
        super().mousePressEvent(event)

    def hide_animated(self):
        """Hide with fade-out animation"""
        if getattr(self, "fade_out", None) is not None:
            return
        self.fade_out = QPropertyAnimation(self.opacity_effect, b"opacity")
        self.fade_out.setDuration(250)
        self.fade_out.setStartValue(1.0)
        self.fade_out.setEndValue(0.0)
        self.fade_out.setEasingCurve(QEasingCurve.InCubic)
        self.fade_out.finished.connect(self._cleanup)
        self.fade_out.start()

    def _cleanup(self):
        """Cleanup and notify manager"""
        if self.parent() and hasattr(self.parent(), "toast_manager"):
            self.parent().toast_manager._remove_toast(self)
        self.deleteLater()


class ToastManager:
    """Manages the stack of toasts in the parent's top-right corner"""

    SPACING = 12
    MARGIN_TOP = 50  # Below window title bar
    MARGIN_RIGHT = 20

    def __init__(self, parent: QWidget):
        self.parent = parent
        self.toasts: list[ToastWidget] = []

    def info(self, message: str, title: Optional[str] = None, duration: int = 3000):
        self._show_toast(message, ToastType.INFO, duration, title)

    def success(self, message: str, title: Optional[str] = None, duration: int = 3000):
        self._show_toast(message, ToastType.SUCCESS, duration, title)

    def warning(self, message: str, title: Optional[str] = None, duration: int = 4000):
        self._show_toast(message, ToastType.WARNING, duration, title)

    def error(self, message: str, title: Optional[str] = None, duration: int = 5000):
        self._show_toast(message, ToastType.ERROR, duration, title)

    def notify_failure(self, title: str, detail: str):
        """Notifier for QueryExecutor: destructive toast with title and detail"""
        self.error(detail, title=title)

    def _show_toast(self, message: str, toast_type: ToastType, duration: int, title: Optional[str]):
        toast = ToastWidget(self.parent, message, toast_type, duration, title=title)
        self.toasts.append(toast)
        self._reposition_toasts()
        toast.show_animated()

    def _remove_toast(self, toast: ToastWidget):
        """Remove toast from queue and reposition"""
        if toast in self.toasts:
            self.toasts.remove(toast)
            QTimer.singleShot(50, self._reposition_toasts)

    def _reposition_toasts(self):
        """Reposition all active toasts in stack"""
        if not self.toasts:
            return

        parent_rect = self.parent.rect()
        parent_global = self.parent.mapToGlobal(parent_rect.topLeft())

        y_offset = self.MARGIN_TOP

        for toast in self.toasts:
            x = parent_rect.width() - toast.width() - self.MARGIN_RIGHT
            target_pos = parent_global + QPoint(x, y_offset)

            if toast.isVisible():
                toast.set_target_y(target_pos.y())
                toast.move(target_pos.x(), toast.y())
            else:
                toast.move(target_pos)

            y_offset += toast.height() + self.SPACING
