"""Async Meta Graph API client.

Signs every request with ``access_token`` + ``appsecret_proof`` and walks
cursor pagination (``paging.next``) until exhausted. Any failed page aborts
the whole fetch; partial results are never returned.
"""
import asyncio
import json
import logging
from typing import AsyncIterator, Optional, Sequence

import aiohttp
from yarl import URL

from ..schemas.dashboard import DateWindow
from ..schemas.graph import (
    AdInsightRow,
    AdsetInsightRow,
    GraphAd,
    GraphAdCreative,
    GraphCampaign,
)
from .constants import (
    AD_CREATIVE_FIELDS,
    AD_INSIGHT_FIELDS,
    ADSET_INSIGHT_FIELDS,
    CAMPAIGN_FIELDS,
    CREATIVE_BATCH_SIZE,
    CREATIVE_METADATA_FIELDS,
    DEFAULT_ATTRIBUTION_WINDOWS,
    GRAPH_BASE_URL,
    PAGE_LIMIT,
)
from .credentials import MetaCredentials
from .exceptions import MetaApiError, MetaTransportError


def normalize_ad_account_id(account_id: str) -> str:
    if not account_id.startswith("act_"):
        return f"act_{account_id}"
    return account_id


def _compact_json(value: object) -> str:
    return json.dumps(value, separators=(",", ":"))


def _insights_params(
    level: str, fields: str, time_range: Optional[DateWindow]
) -> dict[str, str]:
    params = {
        "level": level,
        "fields": fields,
        "limit": PAGE_LIMIT,
        "action_attribution_windows": _compact_json(list(DEFAULT_ATTRIBUTION_WINDOWS)),
    }
    if time_range is not None:
        params["time_range"] = _compact_json(time_range.as_time_range())
    else:
        params["date_preset"] = "maximum"
    return params


class MetaGraphClient:
    """Async client for the Meta Marketing (Graph) API read endpoints."""

    DEFAULT_MAX_CONCURRENCY = 5

    def __init__(
        self,
        credentials: MetaCredentials,
        session: aiohttp.ClientSession,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize Meta Graph client.

        Args:
            credentials: Access token + app secret (never logged)
            session: Injected aiohttp ClientSession
            max_concurrency: Maximum in-flight requests for this client
            logger: Optional logger instance
        """
        self._access_token = credentials.access_token
        self._appsecret_proof = credentials.appsecret_proof
        self.api_version = credentials.api_version
        self.session = session
        self.logger = logger or logging.getLogger(__name__)

        self._semaphore = asyncio.Semaphore(max_concurrency)

    def _redact(self, text: str) -> str:
        if not text:
            return text
        return text.replace(self._access_token, "[REDACTED]")

    def build_url(self, path: str, params: Optional[dict[str, str]] = None) -> URL:
        """Build a signed Graph URL for ``path`` (with or without leading slash)."""
        clean_path = path.lstrip("/")
        url = URL(f"{GRAPH_BASE_URL}/{self.api_version}/{clean_path}")

        query = {
            "access_token": self._access_token,
            "appsecret_proof": self._appsecret_proof,
        }
        for key, value in (params or {}).items():
            if value is not None:
                query[key] = value

        return url.with_query(query)

    def ensure_next_url(self, next_url: Optional[str]) -> Optional[URL]:
        """Re-sign a ``paging.next`` URL; some responses drop the auth params."""
        if not next_url:
            return None

        url = URL(next_url)
        missing: dict[str, str] = {}
        if "appsecret_proof" not in url.query:
            missing["appsecret_proof"] = self._appsecret_proof
        if "access_token" not in url.query:
            missing["access_token"] = self._access_token

        if missing:
            url = url.update_query(missing)
        return url

    async def _request(self, url: URL) -> dict:
        """GET one Graph URL and return the parsed JSON object.

        Raises:
            MetaTransportError: Network failure or unparseable body
            MetaApiError: Non-2xx status or ``error`` object in the body
        """
        async with self._semaphore:
            try:
                async with self.session.get(url) as response:
                    status = response.status
                    body = await response.text()
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                raise MetaTransportError(
                    f"Meta API request failed: {self._redact(str(exc))}"
                ) from exc

        try:
            payload = json.loads(body)
        except ValueError as exc:
            self.logger.error(
                "Meta API returned invalid JSON (%s): %s",
                status,
                self._redact(body[:500]),
            )
            raise MetaTransportError(
                f"Meta API returned invalid JSON (status {status})"
            ) from exc

        error = payload.get("error") if isinstance(payload, dict) else None

        if not 200 <= status < 300 or error:
            message = None
            code = None
            if isinstance(error, dict):
                message = error.get("message")
                code = error.get("code")
            elif error:
                message = str(error)

            if not message:
                message = f"Meta API request failed with status {status}"
            if code is None:
                code = status

            self.logger.error(
                "Meta API error (%s): %s", status, self._redact(body[:500])
            )
            raise MetaApiError(self._redact(message), code)

        if not isinstance(payload, dict):
            raise MetaTransportError(
                f"Meta API returned unexpected payload type: {type(payload).__name__}"
            )

        return payload

    async def iter_pages(
        self, path: str, params: Optional[dict[str, str]] = None
    ) -> AsyncIterator[list[dict]]:
        """Yield each page's ``data`` list, following ``paging.next``."""
        next_url: Optional[URL] = self.build_url(path, params)
        page_number = 0

        while next_url is not None:
            result = await self._request(next_url)
            page_number += 1

            data = result.get("data")
            items = data if isinstance(data, list) else []
            self.logger.debug(
                "Fetched page %s of %s (%s items)", page_number, path, len(items)
            )
            yield items

            paging = result.get("paging")
            next_link = paging.get("next") if isinstance(paging, dict) else None
            next_url = self.ensure_next_url(next_link)

    async def fetch_edge(
        self, path: str, params: Optional[dict[str, str]] = None
    ) -> list[dict]:
        """Fetch every page of an edge and flatten into one list."""
        items: list[dict] = []
        async for page in self.iter_pages(path, params):
            items.extend(page)

        self.logger.info("Fetched %s items from %s", len(items), path)
        return items

    async def fetch_campaigns(self, account_id: str) -> list[GraphCampaign]:
        account_id = normalize_ad_account_id(account_id)
        items = await self.fetch_edge(
            f"/{account_id}/campaigns",
            {"fields": CAMPAIGN_FIELDS, "limit": PAGE_LIMIT},
        )
        return [GraphCampaign.model_validate(item) for item in items]

    async def fetch_adset_insights(
        self, account_id: str, time_range: Optional[DateWindow] = None
    ) -> list[AdsetInsightRow]:
        """Ad-set level insights; falls back to ``date_preset=maximum``."""
        account_id = normalize_ad_account_id(account_id)
        items = await self.fetch_edge(
            f"/{account_id}/insights",
            _insights_params("adset", ADSET_INSIGHT_FIELDS, time_range),
        )
        return [AdsetInsightRow.model_validate(item) for item in items]

    async def fetch_ad_insights(
        self, campaign_id: str, time_range: Optional[DateWindow] = None
    ) -> list[AdInsightRow]:
        items = await self.fetch_edge(
            f"/{campaign_id}/insights",
            _insights_params("ad", AD_INSIGHT_FIELDS, time_range),
        )
        return [AdInsightRow.model_validate(item) for item in items]

    async def fetch_ad_creative_map(self, campaign_id: str) -> dict[str, str]:
        """Map ad id -> creative id for every ad of a campaign."""
        items = await self.fetch_edge(
            f"/{campaign_id}/ads",
            {"fields": AD_CREATIVE_FIELDS, "limit": PAGE_LIMIT},
        )

        mapping: dict[str, str] = {}
        for item in items:
            ad = GraphAd.model_validate(item)
            if ad.id and ad.creative and ad.creative.id:
                mapping[ad.id] = ad.creative.id
        return mapping

    async def fetch_creatives_metadata(
        self, creative_ids: Sequence[str]
    ) -> dict[str, GraphAdCreative]:
        """Batch-fetch creative metadata, CREATIVE_BATCH_SIZE ids per request."""
        unique_ids = list(dict.fromkeys(cid for cid in creative_ids if cid))
        creatives: dict[str, GraphAdCreative] = {}

        for start in range(0, len(unique_ids), CREATIVE_BATCH_SIZE):
            chunk = unique_ids[start : start + CREATIVE_BATCH_SIZE]
            url = self.build_url(
                "/",
                {"ids": ",".join(chunk), "fields": CREATIVE_METADATA_FIELDS},
            )
            result = await self._request(url)

            for creative_id, creative in result.items():
                if creative:
                    creatives[creative_id] = GraphAdCreative.model_validate(creative)

        self.logger.info(
            "Fetched metadata for %s of %s creatives", len(creatives), len(unique_ids)
        )
        return creatives
