"""Bookings panel - paginated booking list driven by a QueryExecutor"""
import logging
from functools import partial
from typing import Optional
from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QHeaderView,
    QLabel,
    QComboBox,
    QStackedWidget,
    QAbstractItemView,
)
from PySide6.QtCore import Qt, Signal
from qasync import asyncSlot
from umrohdesk.models.schemas import (
    Booking,
    BookingStatus,
    BOOKING_STATUS_LABELS,
    status_label,
)
from umrohdesk.services.query_executor import QueryExecutor, QueryOptions, extract_error_message
from umrohdesk.services.supabase.booking_ops import ALL_STATUSES
from umrohdesk.utils.formatting import format_date, format_rupiah

logger = logging.getLogger(__name__)

FILTER_OPTIONS = [(ALL_STATUSES, "Semua")] + [
    (status.value, label) for status, label in BOOKING_STATUS_LABELS.items()
]

COLUMNS = ["Kode", "Paket", "Pemesan", "Keberangkatan", "Total", "Status", "Dibuat"]


class BookingsPanel(QWidget):
    """Booking list with status filter, paging, inline error and manual retry"""

    bookingVerified = Signal(str)  # booking_id

    PAGE_LOADING = 0
    PAGE_ERROR = 1
    PAGE_EMPTY = 2
    PAGE_TABLE = 3

    def __init__(
        self,
        supabase_repo=None,
        toast_manager=None,
        options: Optional[QueryOptions] = None,
        page_size: int = 20,
    ):
        super().__init__()
        self.supabase_repo = supabase_repo
        self.toast_manager = toast_manager
        self.page_size = page_size

        # State
        self.status_filter: str = ALL_STATUSES
        self.page: int = 1
        self.executor: QueryExecutor[list[Booking]] = QueryExecutor(
            notifier=toast_manager.notify_failure if toast_manager else None,
            options=options or QueryOptions(error_message="Gagal memuat data booking"),
            name="bookings",
        )
        self.executor.add_listener(self._render)

        self._setup_ui()
        self._connect_signals()
        self._render()

    def _setup_ui(self):
        """Initialize UI"""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 10, 10, 10)
        layout.setSpacing(8)

        # Toolbar
        toolbar = QHBoxLayout()
        title = QLabel("Booking")
        title.setStyleSheet("font-size: 14pt; font-weight: bold;")
        toolbar.addWidget(title)
        toolbar.addStretch()

        self.filter_combo = QComboBox()
        for value, label in FILTER_OPTIONS:
            self.filter_combo.addItem(label, value)
        toolbar.addWidget(self.filter_combo)

        self.btn_refresh = QPushButton("↻ Muat ulang")
        self.btn_refresh.setCursor(Qt.PointingHandCursor)
        toolbar.addWidget(self.btn_refresh)

        self.btn_verify = QPushButton("✓ Verifikasi pembayaran")
        self.btn_verify.setCursor(Qt.PointingHandCursor)
        self.btn_verify.setEnabled(False)
        toolbar.addWidget(self.btn_verify)
        layout.addLayout(toolbar)

        # Content pages
        self.stack = QStackedWidget()

        self.loading_label = QLabel("Memuat data...")
        self.loading_label.setAlignment(Qt.AlignCenter)
        self.stack.addWidget(self.loading_label)

        error_page = QWidget()
        error_layout = QVBoxLayout(error_page)
        error_layout.addStretch()
        self.error_label = QLabel()
        self.error_label.setAlignment(Qt.AlignCenter)
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet("color: #d9534f;")
        error_layout.addWidget(self.error_label)
        self.btn_retry = QPushButton("Coba lagi")
        self.btn_retry.setCursor(Qt.PointingHandCursor)
        error_layout.addWidget(self.btn_retry, alignment=Qt.AlignCenter)
        error_layout.addStretch()
        self.stack.addWidget(error_page)

        self.empty_label = QLabel("Belum Ada Booking\nBooking dari jemaah akan muncul di sini")
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.stack.addWidget(self.empty_label)

        self.table = QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)
        self.stack.addWidget(self.table)

        layout.addWidget(self.stack, 1)

        # Paging
        paging = QHBoxLayout()
        paging.addStretch()
        self.btn_prev = QPushButton("‹ Sebelumnya")
        self.page_label = QLabel()
        self.btn_next = QPushButton("Berikutnya ›")
        paging.addWidget(self.btn_prev)
        paging.addWidget(self.page_label)
        paging.addWidget(self.btn_next)
        layout.addLayout(paging)

    def _connect_signals(self):
        self.filter_combo.currentIndexChanged.connect(self._on_filter_changed)
        self.btn_refresh.clicked.connect(self._on_refresh_clicked)
        self.btn_retry.clicked.connect(self._on_retry_clicked)
        self.btn_prev.clicked.connect(self._on_prev_clicked)
        self.btn_next.clicked.connect(self._on_next_clicked)
        self.btn_verify.clicked.connect(self._on_verify_clicked)
        self.table.itemSelectionChanged.connect(self._update_verify_button)

    # Loading

    async def load(self):
        """Fetch the current page with the current filter"""
        if self.supabase_repo is None:
            logger.warning("BookingsPanel.load: repository not set")
            return None
        operation = partial(
            self.supabase_repo.list_bookings,
            status=self.status_filter,
            page=self.page,
            page_size=self.page_size,
        )
        return await self.executor.execute(operation)

    @asyncSlot()
    async def _on_refresh_clicked(self):
        await self.load()

    @asyncSlot()
    async def _on_retry_clicked(self):
        await self.executor.retry()

    @asyncSlot(int)
    async def _on_filter_changed(self, index: int):
        self.status_filter = self.filter_combo.itemData(index)
        self.page = 1
        await self.load()

    @asyncSlot()
    async def _on_prev_clicked(self):
        if self.page > 1:
            self.page -= 1
            await self.load()

    @asyncSlot()
    async def _on_next_clicked(self):
        if self.has_next_page:
            self.page += 1
            await self.load()

    @property
    def has_next_page(self) -> bool:
        data = self.executor.data
        return bool(data) and len(data) >= self.page_size

    # Verification

    def selected_booking(self) -> Optional[Booking]:
        rows = self.table.selectionModel().selectedRows() if self.table.selectionModel() else []
        if not rows or not self.executor.data:
            return None
        row = rows[0].row()
        if row >= len(self.executor.data):
            return None
        return self.executor.data[row]

    def _update_verify_button(self):
        booking = self.selected_booking()
        can_verify = (
            booking is not None
            and booking.status == BookingStatus.WAITING_PAYMENT.value
            and not self.executor.loading
        )
        self.btn_verify.setEnabled(can_verify)

    @asyncSlot()
    async def _on_verify_clicked(self):
        booking = self.selected_booking()
        if booking is None:
            return
        await self.verify_booking(booking)

    async def verify_booking(self, booking: Booking):
        """Mark booking paid; on success update the row in place and reload"""
        try:
            _, error = await self.supabase_repo.verify_booking_payment(booking.id)
        except Exception as e:
            logger.error(f"Verify booking {booking.id} failed: {e}", exc_info=True)
            error = e

        if error:
            message = extract_error_message(error) or "Gagal memverifikasi pembayaran"
            if self.toast_manager:
                self.toast_manager.error(message, title="Gagal verifikasi")
            return False

        # Show the new status right away, the reload confirms it
        if self.executor.data:
            self.executor.set_data(
                [
                    b.model_copy(update={"status": BookingStatus.PAID.value}) if b.id == booking.id else b
                    for b in self.executor.data
                ]
            )
        if self.toast_manager:
            self.toast_manager.success("Pembayaran diverifikasi!")
        self.bookingVerified.emit(booking.id)
        await self.load()
        return True

    # Rendering

    def _render(self):
        """Sync widgets with executor state"""
        executor = self.executor
        busy = executor.loading

        for widget in (self.filter_combo, self.btn_refresh, self.btn_retry):
            widget.setEnabled(not busy)
        self.btn_prev.setEnabled(not busy and self.page > 1)
        self.btn_next.setEnabled(not busy and self.has_next_page)
        self.page_label.setText(f"Halaman {self.page}")

        if busy:
            self.stack.setCurrentIndex(self.PAGE_LOADING)
        elif executor.error:
            self.error_label.setText(executor.error)
            self.stack.setCurrentIndex(self.PAGE_ERROR)
        elif not executor.data:
            self.stack.setCurrentIndex(self.PAGE_EMPTY)
        else:
            self._fill_table(executor.data)
            self.stack.setCurrentIndex(self.PAGE_TABLE)

        self._update_verify_button()

    def _fill_table(self, bookings: list[Booking]):
        self.table.setRowCount(len(bookings))
        for row, booking in enumerate(bookings):
            departure_date = booking.departure.departure_date if booking.departure else None
            values = [
                booking.booking_code,
                booking.package_title,
                booking.customer_name,
                format_date(departure_date),
                format_rupiah(booking.total_price),
                status_label(booking.status, BOOKING_STATUS_LABELS),
                format_date(booking.created_at),
            ]
            for col, value in enumerate(values):
                item = QTableWidgetItem(value)
                item.setData(Qt.UserRole, booking.id)
                self.table.setItem(row, col, item)
