"""Pilgrim roster operations for Supabase repository"""

from umrohdesk.models.schemas import Pilgrim
from umrohdesk.services.query_executor import QueryResult

PILGRIM_COLUMNS = """
    *,
    booking:bookings(
        id, booking_code, status, total_price,
        package:packages(title),
        departure:package_departures(departure_date)
    )
"""


def filter_pilgrims(pilgrims: list[Pilgrim], search: str) -> list[Pilgrim]:
    """Case-insensitive search over name, NIK, passport, phone, email and booking code"""
    needle = search.strip().lower()
    if not needle:
        return list(pilgrims)

    def _matches(p: Pilgrim) -> bool:
        fields = [
            p.name,
            p.nik,
            p.passport_number,
            p.phone,
            p.email,
            p.booking.booking_code if p.booking else None,
        ]
        return any(needle in f.lower() for f in fields if f)

    return [p for p in pilgrims if _matches(p)]


class PilgrimOpsMixin:
    """Mixin for pilgrim operations"""

    async def list_pilgrims(self) -> QueryResult:
        """List registered pilgrims newest first with their booking"""

        def _sync_list():
            client = self._get_client()
            response = (
                client.table("booking_pilgrims")
                .select(PILGRIM_COLUMNS)
                .order("created_at", desc=True)
                .execute()
            )
            return [Pilgrim(**row) for row in response.data]

        return await self._run("list_pilgrims", _sync_list)
