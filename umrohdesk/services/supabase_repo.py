"""Supabase repository - async data access returning (data, error) results"""

import asyncio
import logging
from typing import Any, Callable, Optional
from postgrest.exceptions import APIError
from supabase import create_client, Client

from umrohdesk.services.query_executor import QueryResult
from umrohdesk.services.supabase.booking_ops import BookingOpsMixin
from umrohdesk.services.supabase.payment_ops import PaymentOpsMixin
from umrohdesk.services.supabase.pilgrim_ops import PilgrimOpsMixin
from umrohdesk.services.supabase.package_ops import PackageOpsMixin
from umrohdesk.services.supabase.itinerary_ops import ItineraryOpsMixin
from umrohdesk.services.supabase.blog_ops import BlogOpsMixin
from umrohdesk.utils.errors import ServiceError

logger = logging.getLogger(__name__)


class SupabaseRepo(
    BookingOpsMixin,
    PaymentOpsMixin,
    PilgrimOpsMixin,
    PackageOpsMixin,
    ItineraryOpsMixin,
    BlogOpsMixin,
):
    """Async Supabase data access layer

    Every operation returns a QueryResult. PostgREST errors land in the error
    slot, anything else (network, parsing) is raised to the caller.
    """

    def __init__(self, url: str, key: str):
        logger.info(f"Initializing SupabaseRepo: url={url[:30]}...")
        self.url = url
        self.key = key
        self._client: Optional[Client] = None

    @classmethod
    def from_settings(cls, settings) -> "SupabaseRepo":
        url, key = settings.supabase_credentials()
        return cls(url=url, key=key)

    def _get_client(self) -> Client:
        """Lazy init Supabase client"""
        if self._client is None:
            logger.info("Creating Supabase client...")
            self._client = create_client(self.url, self.key)
            logger.info("Supabase client created")
        return self._client

    async def _run(self, label: str, sync_fn: Callable[[], Any]) -> QueryResult:
        """Run a blocking PostgREST call in a thread and wrap its outcome"""

        def _sync_wrapped() -> QueryResult:
            try:
                return QueryResult(sync_fn(), None)
            except APIError as e:
                logger.warning(f"{label}: PostgREST error {e.code}: {e.message}")
                return QueryResult(None, e)

        return await asyncio.to_thread(_sync_wrapped)

    async def _save_row(self, table: str, payload: dict, row_id: Optional[str], model) -> QueryResult:
        """Insert payload, or update row_id when given, and parse the returned row"""

        def _sync_save():
            client = self._get_client()
            if row_id:
                response = client.table(table).update(payload).eq("id", row_id).execute()
            else:
                response = client.table(table).insert(payload).execute()
            if not response.data:
                raise ServiceError(f"{table}: save returned no row (id={row_id})")
            logger.info(f"{table}: saved row {response.data[0].get('id')}")
            return model(**response.data[0])

        return await self._run(f"save {table}", _sync_save)

    async def _delete_row(self, table: str, row_id: str) -> QueryResult:
        def _sync_delete():
            client = self._get_client()
            client.table(table).delete().eq("id", row_id).execute()
            logger.info(f"{table}: deleted row {row_id}")
            return True

        return await self._run(f"delete {table}", _sync_delete)
