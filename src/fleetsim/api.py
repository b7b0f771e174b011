"""aiohttp web application exposing the fleet over HTTP/JSON."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from aiohttp import web
from pydantic import ValidationError

from fleetsim.config import FleetConfig
from fleetsim.exceptions import CarNotFoundError, PersistenceError
from fleetsim.service import FleetService

_logger = logging.getLogger(__name__)

FLEET_KEY: web.AppKey[FleetService] = web.AppKey("fleet", FleetService)


def _error(status: int, message: str, **extra: Any) -> web.Response:
    return web.json_response({"error": message, **extra}, status=status)


async def _read_json(request: web.Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise web.HTTPBadRequest(
            text=json.dumps({"error": f"Invalid JSON body: {exc}"}),
            content_type="application/json",
        ) from exc


@web.middleware
async def error_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
    try:
        return await handler(request)
    except CarNotFoundError as exc:
        return _error(404, str(exc))
    except ValidationError as exc:
        return _error(400, "Invalid car payload", details=json.loads(exc.json()))
    except PersistenceError as exc:
        return _error(409, str(exc))


async def get_summary(request: web.Request) -> web.Response:
    fleet = request.app[FLEET_KEY]
    return web.Response(text=await fleet.summary())


async def list_cars(request: web.Request) -> web.Response:
    fleet = request.app[FLEET_KEY]
    cars = await fleet.get_all()
    return web.json_response([car.model_dump(mode="json") for car in cars])


async def get_car(request: web.Request) -> web.Response:
    fleet = request.app[FLEET_KEY]
    car = await fleet.get_by_id(request.match_info["car_id"])
    return web.json_response(car.model_dump(mode="json"))


async def create_car(request: web.Request) -> web.Response:
    fleet = request.app[FLEET_KEY]
    body = await _read_json(request)
    if not isinstance(body, dict):
        return _error(400, "Expected a JSON object")
    car = await fleet.create(body)
    return web.json_response(car.model_dump(mode="json"), status=201)


async def update_car(request: web.Request) -> web.Response:
    fleet = request.app[FLEET_KEY]
    body = await _read_json(request)
    if not isinstance(body, dict):
        return _error(400, "Expected a JSON object")
    car = await fleet.update(request.match_info["car_id"], body)
    return web.json_response(car.model_dump(mode="json"))


async def delete_car(request: web.Request) -> web.Response:
    fleet = request.app[FLEET_KEY]
    await fleet.delete(request.match_info["car_id"])
    return web.Response(status=204)


async def get_status_distribution(request: web.Request) -> web.Response:
    fleet = request.app[FLEET_KEY]
    distribution = await fleet.status_distribution()
    return web.json_response([item.model_dump(mode="json") for item in distribution])


def create_app(config: FleetConfig | None = None, *, fleet: FleetService | None = None) -> web.Application:
    """Build the web application.

    The fleet service is entered and started on application startup and
    shut down on cleanup.  Pass *fleet* to supply a pre-built service
    (e.g. with a custom store); otherwise one is built from *config*.
    """
    service = fleet if fleet is not None else FleetService(config)

    async def fleet_ctx(app: web.Application) -> AsyncIterator[None]:
        async with app[FLEET_KEY] as running:
            await running.start()
            _logger.info("Fleet service started")
            yield
        _logger.info("Fleet service stopped")

    app = web.Application(middlewares=[error_middleware])
    app[FLEET_KEY] = service
    app.cleanup_ctx.append(fleet_ctx)
    app.router.add_get("/", get_summary)
    app.router.add_get("/status-distribution", get_status_distribution)
    app.router.add_get("/cars", list_cars)
    app.router.add_post("/cars", create_car)
    app.router.add_get("/cars/{car_id}", get_car)
    app.router.add_put("/cars/{car_id}", update_car)
    app.router.add_delete("/cars/{car_id}", delete_car)
    return app
