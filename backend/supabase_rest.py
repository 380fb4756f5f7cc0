"""
supabase_rest.py — HTTP-based read client using Supabase's PostgREST API.
Lets the progress endpoints run against the hosted edge backend without a
direct Postgres connection. Uses only httpx.
"""
import logging
from urllib.parse import quote

import httpx

from config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, SUPABASE_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


def _headers():
    return {
        "apikey": SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {SUPABASE_SERVICE_ROLE_KEY}",
        "Content-Type": "application/json",
    }


def _build_url(table: str, columns: str, filters: dict = None, query_string: str = None) -> str:
    url = f"{SUPABASE_URL}/rest/v1/{table}?select={columns}"
    if filters:
        for key, value in filters.items():
            url += f"&{key}=eq.{quote(str(value))}"
    if query_string:
        url += f"&{query_string}"
    return url


def in_filter(column: str, values) -> str:
    """PostgREST `in` operator, e.g. id=in.(1,2,3)."""
    joined = ",".join(quote(str(v)) for v in values)
    return f"{column}=in.({joined})"


def sb_select(table: str, filters: dict = None, columns: str = "*", query_string: str = None) -> list:
    """Select rows from a table with optional equality filters or raw query."""
    url = _build_url(table, columns, filters, query_string)
    with httpx.Client(timeout=SUPABASE_TIMEOUT_SECONDS) as client:
        resp = client.get(url, headers=_headers())
        resp.raise_for_status()
        return resp.json()


def sb_count(table: str, filters: dict = None, query_string: str = None) -> int:
    """Count rows in a table with optional filters."""
    url = _build_url(table, "id", filters, query_string)
    headers = {**_headers(), "Prefer": "count=exact"}
    with httpx.Client(timeout=SUPABASE_TIMEOUT_SECONDS) as client:
        # HEAD returns just the count via the content-range header
        resp = client.head(url, headers=headers)
        resp.raise_for_status()
        content_range = resp.headers.get("content-range", "0-0/0")
        try:
            return int(content_range.split("/")[-1])
        except ValueError:
            logger.warning(f"Unexpected content-range from {table}: {content_range}")
            return 0


def sb_select_all(table: str, filters: dict = None, columns: str = "*", query_string: str = None,
                  page_size: int = 1000) -> list:
    """Like sb_select, but pages with limit/offset until a page comes back empty.

    The server may cap a page below `page_size` (PostgREST max-rows), so the
    offset advances by the rows actually returned.
    """
    rows = []
    offset = 0
    while True:
        page_query = f"limit={page_size}&offset={offset}"
        if query_string:
            page_query = f"{query_string}&{page_query}"
        page = sb_select(table, filters=filters, columns=columns, query_string=page_query)
        if not page:
            return rows
        rows.extend(page)
        offset += len(page)
