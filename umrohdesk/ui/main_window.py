"""Main application window"""

import asyncio
import logging
from PySide6.QtWidgets import QMainWindow
from PySide6.QtCore import QTimer

from umrohdesk.config import Settings
from umrohdesk.services.query_executor import QueryOptions
from umrohdesk.services.supabase_repo import SupabaseRepo
from umrohdesk.ui.toast import ToastManager
from umrohdesk.ui.bookings_panel import BookingsPanel

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Back-office window hosting the bookings panel"""

    def __init__(self, settings: Settings):
        super().__init__()
        self.setWindowTitle("umrohdesk")
        self.resize(1200, 760)
        self.settings = settings

        # Toast manager (ToastWidget looks it up on its parent)
        self.toast_manager = ToastManager(self)

        self.supabase_repo = SupabaseRepo.from_settings(settings)

        self.bookings_panel = BookingsPanel(
            supabase_repo=self.supabase_repo,
            toast_manager=self.toast_manager,
            options=QueryOptions.from_settings(settings, error_message="Gagal memuat data booking"),
            page_size=settings.page_size,
        )
        self.setCentralWidget(self.bookings_panel)

        # Initial load once the event loop runs
        QTimer.singleShot(0, self._initial_load)

    def _initial_load(self):
        logger.info("Initial bookings load")
        asyncio.ensure_future(self.bookings_panel.load())
