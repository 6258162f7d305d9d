"""Payment operations for Supabase repository"""

import logging
from umrohdesk.models.schemas import BookingStatus, Payment, PaymentStatus
from umrohdesk.services.query_executor import QueryResult
from umrohdesk.utils.formatting import utc_now_iso

logger = logging.getLogger(__name__)

PAYMENT_COLUMNS = """
    *,
    booking:bookings(id, booking_code, status, total_price, user_id)
"""


class PaymentOpsMixin:
    """Mixin for payment verification"""

    async def list_payments(self) -> QueryResult:
        """List payments newest first with their booking"""

        def _sync_list():
            client = self._get_client()
            response = (
                client.table("payments")
                .select(PAYMENT_COLUMNS)
                .order("created_at", desc=True)
                .execute()
            )
            return [Payment(**row) for row in response.data]

        return await self._run("list_payments", _sync_list)

    async def verify_payment(self, payment: Payment, approve: bool) -> QueryResult:
        """Approve or reject a payment and move its booking accordingly.

        The booking is only touched after the payment update succeeded.
        """

        def _sync_verify():
            client = self._get_client()
            now = utc_now_iso()
            client.table("payments").update(
                {
                    "status": PaymentStatus.PAID.value if approve else PaymentStatus.FAILED.value,
                    "verified_at": now,
                    "paid_at": now if approve else None,
                }
            ).eq("id", payment.id).execute()

            if payment.booking:
                client.table("bookings").update(
                    {"status": BookingStatus.PAID.value if approve else BookingStatus.CANCELLED.value}
                ).eq("id", payment.booking.id).execute()

            logger.info(f"Payment {payment.id} {'approved' if approve else 'rejected'}")
            return True

        return await self._run("verify_payment", _sync_verify)
