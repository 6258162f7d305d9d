"""Itinerary builder operations for Supabase repository"""

from typing import Optional
from umrohdesk.models.schemas import Departure, Itinerary, ItineraryDay
from umrohdesk.services.query_executor import QueryResult
from umrohdesk.services.supabase.row_utils import blank_to_none

ITINERARY_COLUMNS = """
    *,
    departure:package_departures(id, departure_date, package:packages(title)),
    days:itinerary_days(*)
"""


class ItineraryOpsMixin:
    """Mixin for itineraries and their days"""

    async def list_itineraries(self) -> QueryResult:
        """List itineraries newest first; days come sorted by day_number"""

        def _sync_list():
            client = self._get_client()
            response = (
                client.table("itineraries")
                .select(ITINERARY_COLUMNS)
                .order("created_at", desc=True)
                .execute()
            )
            return [Itinerary(**row) for row in response.data]

        return await self._run("list_itineraries", _sync_list)

    async def list_active_departures(self) -> QueryResult:
        """Active departures, earliest first"""

        def _sync_list():
            client = self._get_client()
            response = (
                client.table("package_departures")
                .select("id, departure_date, package:packages(title)")
                .eq("status", "active")
                .order("departure_date")
                .execute()
            )
            return [Departure(**row) for row in response.data]

        return await self._run("list_active_departures", _sync_list)

    async def save_itinerary(
        self,
        departure_id: str,
        title: str = "",
        notes: str = "",
        itinerary_id: Optional[str] = None,
    ) -> QueryResult:
        """Insert or update an itinerary header"""
        payload = blank_to_none(
            {"departure_id": departure_id, "title": title, "notes": notes}, ("title", "notes")
        )
        return await self._save_row("itineraries", payload, itinerary_id, Itinerary)

    async def save_itinerary_day(
        self,
        itinerary_id: str,
        day_number: int,
        title: str = "",
        description: str = "",
        image_url: str = "",
        day_id: Optional[str] = None,
    ) -> QueryResult:
        """Insert or update one day of an itinerary"""
        if day_number < 1:
            raise ValueError(f"day_number must be >= 1, got {day_number}")
        payload = blank_to_none(
            {
                "day_number": day_number,
                "title": title,
                "description": description,
                "image_url": image_url,
            },
            ("title", "description", "image_url"),
        )
        if not day_id:
            payload["itinerary_id"] = itinerary_id
        return await self._save_row("itinerary_days", payload, day_id, ItineraryDay)

    async def delete_itinerary(self, itinerary_id: str) -> QueryResult:
        return await self._delete_row("itineraries", itinerary_id)

    async def delete_itinerary_day(self, day_id: str) -> QueryResult:
        return await self._delete_row("itinerary_days", day_id)
