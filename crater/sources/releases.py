"""Release indexes: which stable/beta/nightly toolchain was current on a date."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Mapping, Optional, Union

import httpx

from crater.models import Toolchain, format_date, parse_date
from crater.sources.base import ReleaseIndex
from crater.utils.errors import DataUnavailable
from crater.utils.logging import get_logger

logger = get_logger("sources.releases")

DEFAULT_DIST_URL = "https://static.rust-lang.org/dist"
MANIFEST_TEMPLATE = "{base}/{date}/channel-rust-{channel}.toml"


class StaticReleaseIndex(ReleaseIndex):
    """Release index backed by a configured table of release dates."""

    def __init__(self, releases: Mapping[str, Iterable[Union[str, date]]]) -> None:
        """
        Initialize the index.

        Args:
            releases: Channel name -> release dates (date objects or YYYY-MM-DD)
        """
        self.releases: dict[str, list[date]] = {}
        for channel, dates in releases.items():
            parsed = [d if isinstance(d, date) else parse_date(str(d)) for d in dates]
            self.releases[channel] = sorted(parsed)

    async def resolve(self, channel: str, as_of: date) -> Toolchain:
        candidates = [d for d in self.releases.get(channel, []) if d <= as_of]
        if not candidates:
            raise DataUnavailable(f"no {channel} release on or before {format_date(as_of)}")
        return Toolchain(channel=channel, date=candidates[-1])


class HttpReleaseIndex(ReleaseIndex):
    """
    Release index that probes the distribution server for channel manifests.

    A channel's release for a date is the newest day, going back at most
    ``lookback_days``, that has a manifest for that channel.
    """

    def __init__(
        self,
        dist_url: str = DEFAULT_DIST_URL,
        lookback_days: int = 60,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the index.

        Args:
            dist_url: Base URL of the distribution server
            lookback_days: How many days before the date to probe
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.dist_url = dist_url.rstrip("/")
        self.lookback_days = lookback_days
        self.timeout = timeout
        self.transport = transport

    def manifest_url(self, channel: str, day: date) -> str:
        return MANIFEST_TEMPLATE.format(base=self.dist_url, date=format_date(day), channel=channel)

    async def resolve(self, channel: str, as_of: date) -> Toolchain:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            return await self._probe(client, channel, as_of)

    async def resolve_all(self, as_of: date) -> dict[str, Toolchain]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            return {
                channel: await self._probe(client, channel, as_of)
                for channel in self.CHANNELS
            }

    async def _probe(self, client: httpx.AsyncClient, channel: str, as_of: date) -> Toolchain:
        for offset in range(self.lookback_days + 1):
            day = as_of - timedelta(days=offset)
            url = self.manifest_url(channel, day)
            try:
                response = await client.head(url)
            except httpx.HTTPError as e:
                logger.error("release_probe_failed", channel=channel, url=url, error=str(e))
                raise DataUnavailable(f"cannot reach distribution server: {e}") from e

            if response.status_code == 200:
                logger.debug("release_found", channel=channel, date=format_date(day))
                return Toolchain(channel=channel, date=day)
            if response.status_code not in (403, 404):
                raise DataUnavailable(
                    f"unexpected status {response.status_code} probing {url}"
                )

        raise DataUnavailable(
            f"no {channel} release within {self.lookback_days} days before {format_date(as_of)}"
        )
