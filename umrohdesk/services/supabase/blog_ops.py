"""Blog operations for Supabase repository"""

import logging
from typing import Optional
from umrohdesk.models.schemas import BlogPost
from umrohdesk.services.query_executor import QueryResult
from umrohdesk.services.supabase.row_utils import slugify
from umrohdesk.utils.formatting import utc_now_iso

logger = logging.getLogger(__name__)

BLOG_FIELDS = (
    "title",
    "slug",
    "excerpt",
    "content",
    "image_url",
    "category",
    "author",
    "seo_title",
    "seo_description",
    "is_published",
)

# Columns needed by the public blog section
PUBLIC_POST_COLUMNS = "id, title, slug, excerpt, image_url, category, author, published_at, created_at"


class BlogOpsMixin:
    """Mixin for blog posts (admin list and public section)"""

    async def list_posts(self) -> QueryResult:
        """All posts, newest first"""

        def _sync_list():
            client = self._get_client()
            response = (
                client.table("blog_posts")
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
            return [BlogPost(**row) for row in response.data]

        return await self._run("list_posts", _sync_list)

    async def list_published_posts(self, limit: int = 3) -> QueryResult:
        """Latest published posts for the public blog section"""

        def _sync_list():
            client = self._get_client()
            response = (
                client.table("blog_posts")
                .select(PUBLIC_POST_COLUMNS)
                .eq("is_published", True)
                .order("published_at", desc=True)
                .limit(limit)
                .execute()
            )
            return [BlogPost(**row) for row in response.data]

        return await self._run("list_published_posts", _sync_list)

    async def save_post(self, data: dict, post_id: Optional[str] = None) -> QueryResult:
        """Insert or update a post; published_at follows is_published"""
        payload = {k: v for k, v in data.items() if k in BLOG_FIELDS}
        payload["slug"] = payload.get("slug") or slugify(payload.get("title", ""))
        payload["published_at"] = utc_now_iso() if payload.get("is_published") else None
        return await self._save_row("blog_posts", payload, post_id, BlogPost)

    async def toggle_post_published(self, post: BlogPost) -> QueryResult:
        """Flip the published flag of a post"""
        publish = not post.is_published

        def _sync_toggle():
            client = self._get_client()
            client.table("blog_posts").update(
                {"is_published": publish, "published_at": utc_now_iso() if publish else None}
            ).eq("id", post.id).execute()
            logger.info(f"Post {post.id} {'published' if publish else 'unpublished'}")
            return publish

        return await self._run("toggle_post_published", _sync_toggle)

    async def delete_post(self, post_id: str) -> QueryResult:
        return await self._delete_row("blog_posts", post_id)
