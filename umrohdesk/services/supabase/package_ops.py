"""Package catalogue operations for Supabase repository"""

from typing import Optional
from umrohdesk.models.schemas import PackageCategory, TravelPackage
from umrohdesk.services.query_executor import QueryResult
from umrohdesk.services.supabase.row_utils import blank_to_none, slugify

# Columns the packages form is allowed to write
PACKAGE_FIELDS = (
    "title",
    "slug",
    "description",
    "package_type",
    "duration_days",
    "image_url",
    "category_id",
    "is_active",
)


class PackageOpsMixin:
    """Mixin for package and category operations"""

    async def list_packages(self) -> QueryResult:
        """List all packages newest first"""

        def _sync_list():
            client = self._get_client()
            response = (
                client.table("packages")
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
            return [TravelPackage(**row) for row in response.data]

        return await self._run("list_packages", _sync_list)

    async def list_categories(self) -> QueryResult:
        """List active package categories in display order"""

        def _sync_list():
            client = self._get_client()
            response = (
                client.table("package_categories")
                .select("id, name")
                .eq("is_active", True)
                .order("sort_order")
                .execute()
            )
            return [PackageCategory(**row) for row in response.data]

        return await self._run("list_categories", _sync_list)

    async def save_package(self, data: dict, package_id: Optional[str] = None) -> QueryResult:
        """Insert a package, or update it when package_id is given"""
        payload = {k: v for k, v in data.items() if k in PACKAGE_FIELDS}
        payload = blank_to_none(payload, ("description", "package_type", "image_url", "category_id"))
        payload["slug"] = payload.get("slug") or slugify(payload.get("title", ""))
        return await self._save_row("packages", payload, package_id, TravelPackage)

    async def delete_package(self, package_id: str) -> QueryResult:
        return await self._delete_row("packages", package_id)
