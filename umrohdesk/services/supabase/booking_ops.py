"""Booking operations for Supabase repository"""

import logging
from umrohdesk.models.schemas import Booking, BookingStatus, PaymentStatus
from umrohdesk.services.query_executor import QueryResult
from umrohdesk.utils.formatting import utc_now_iso

logger = logging.getLogger(__name__)

BOOKING_COLUMNS = """
    id, booking_code, total_price, status, created_at, package_id, pic_type, pic_id,
    package:packages(title),
    departure:package_departures(departure_date),
    profile:profiles(name, email)
"""

# Filter value meaning "no status filter"
ALL_STATUSES = "all"


class BookingOpsMixin:
    """Mixin for booking operations"""

    async def list_bookings(
        self, status: str = ALL_STATUSES, page: int = 1, page_size: int = 20
    ) -> QueryResult:
        """List bookings newest first, optionally filtered by status, one page at a time"""
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        start = (page - 1) * page_size
        end = start + page_size - 1

        def _sync_list():
            client = self._get_client()
            query = client.table("bookings").select(BOOKING_COLUMNS).order("created_at", desc=True)
            if status != ALL_STATUSES:
                query = query.eq("status", status)
            response = query.range(start, end).execute()
            logger.info(f"list_bookings: status={status} page={page}: {len(response.data)} rows")
            return [Booking(**row) for row in response.data]

        return await self._run("list_bookings", _sync_list)

    async def verify_booking_payment(self, booking_id: str) -> QueryResult:
        """Mark booking paid, then mark its payments paid"""

        def _sync_verify():
            client = self._get_client()
            client.table("bookings").update({"status": BookingStatus.PAID.value}).eq(
                "id", booking_id
            ).execute()
            client.table("payments").update(
                {"status": PaymentStatus.PAID.value, "paid_at": utc_now_iso()}
            ).eq("booking_id", booking_id).execute()
            logger.info(f"Booking {booking_id} verified as paid")
            return True

        return await self._run("verify_booking_payment", _sync_verify)
