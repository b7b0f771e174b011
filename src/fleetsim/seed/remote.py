"""REST seed source backed by a mock API (``/cars`` collection style)."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp
from pydantic import ValidationError

from fleetsim.exceptions import SeedSourceUnavailableError
from fleetsim.models.car import Car, CarCreate

_logger = logging.getLogger(__name__)


class MockApiSeedSource:
    """Seed source speaking plain JSON to a collection endpoint.

    * ``GET <base_url>`` lists cars
    * ``POST <base_url>`` creates one and returns it with its id
    * ``PUT <base_url>/<id>`` replaces one

    Every failure (network, timeout, non-2xx, bad JSON, records that do
    not validate as cars) is raised as
    :class:`SeedSourceUnavailableError`.
    """

    def __init__(
        self,
        base_url: str,
        http_session: aiohttp.ClientSession,
        *,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _request(self, method: str, url: str, payload: dict[str, Any] | None = None) -> Any:
        _logger.debug("%s %s", method, url)
        try:
            async with self._http.request(method, url, json=payload, timeout=self._timeout) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise SeedSourceUnavailableError(
                        f"HTTP {resp.status} from {method} {url}: {text[:200]}",
                        status_code=resp.status,
                        url=url,
                    )
        except SeedSourceUnavailableError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise SeedSourceUnavailableError(
                f"{method} {url} failed: {exc!r}",
                url=url,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise SeedSourceUnavailableError(
                f"Invalid JSON from {method} {url}: {text[:200]}",
                url=url,
            ) from exc

    def _parse_car(self, data: Any, url: str) -> Car:
        try:
            return Car.model_validate(data)
        except (ValidationError, OverflowError) as exc:
            raise SeedSourceUnavailableError(f"Invalid car record from {url}: {exc}", url=url) from exc

    async def list(self) -> list[Car]:
        url = self._base_url
        body = await self._request("GET", url)
        if not isinstance(body, list):
            raise SeedSourceUnavailableError(f"Expected a JSON list from {url}", url=url)
        return [self._parse_car(item, url) for item in body]

    async def create(self, draft: CarCreate) -> CarCreate:
        url = self._base_url
        payload = draft.model_dump(mode="json", exclude_none=True)
        body = await self._request("POST", url, payload)
        car = self._parse_car(body, url)
        _logger.info("Created new car in seed source: %s", car.id)
        return CarCreate.model_validate(car.model_dump())

    async def update(self, car_id: str, car: Car) -> Car:
        url = f"{self._base_url}/{car_id}"
        body = await self._request("PUT", url, car.model_dump(mode="json"))
        return self._parse_car(body, url)
