"""
HTTP surface for the OzBargain Deal Notifier.

Exposes a health check, a manual trigger for runs and summaries, and the
Discord interactions endpoint that answers the /ozb slash-command.
"""

import asyncio
import json
from typing import Optional

from aiohttp import web

from .models.config import NotifierConfig
from .models.interaction import Interaction, InteractionResponseType, InteractionType
from .orchestrator import DealNotifierService
from .services.config_manager import to_int
from .services.interaction_verifier import InteractionVerifier
from .utils.logging import get_logger

SERVICE_KEY = web.AppKey("service", DealNotifierService)
VERIFIER_KEY = web.AppKey("verifier", object)
TASKS_KEY = web.AppKey("tasks", set)

COMMAND_NAME = "ozb"

logger = get_logger("server")


def _build_verifier(public_key: Optional[str]) -> Optional[InteractionVerifier]:
    if not public_key:
        return None
    try:
        return InteractionVerifier(public_key)
    except ValueError as e:
        logger.error("Invalid DISCORD_PUBLIC_KEY", extra={"error": str(e)})
        return None


async def handle_root(request: web.Request) -> web.Response:
    return web.Response(text="ok")


async def handle_run(request: web.Request) -> web.Response:
    """Trigger a run, or a manual summary when summary=1."""
    service = request.app[SERVICE_KEY]
    query = request.rel_url.query

    force = query.get("force") == "1"
    limit = to_int(query.get("limit"))

    if query.get("summary") == "1":
        result = await service.run_summary_async(label="manual", limit=limit)
    else:
        result = await service.run_async(force=force, limit=limit)

    logger.info("Manual trigger finished", extra=result.to_dict())
    return web.json_response(result.to_dict(), dumps=_pretty_dumps)


async def handle_interaction(request: web.Request) -> web.Response:
    """Discord interactions endpoint."""
    verifier = request.app[VERIFIER_KEY]
    if verifier is None:
        return web.Response(status=500, text="Missing DISCORD_PUBLIC_KEY")

    signature = request.headers.get("X-Signature-Ed25519")
    timestamp = request.headers.get("X-Signature-Timestamp")
    if not signature or not timestamp:
        return web.Response(status=401, text="Unauthorized")

    body = await request.read()
    if not verifier.verify(signature, timestamp, body):
        logger.warning("Rejected interaction with invalid signature")
        return web.Response(status=401, text="Unauthorized")

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return web.Response(status=400, text="Invalid JSON")
    if not isinstance(payload, dict):
        return web.Response(status=400, text="Invalid JSON")

    interaction = Interaction.from_payload(payload)

    if interaction.type == InteractionType.PING:
        return web.json_response({"type": InteractionResponseType.PONG})

    if (
        interaction.type == InteractionType.APPLICATION_COMMAND
        and interaction.command_name == COMMAND_NAME
    ):
        _spawn(request.app, request.app[SERVICE_KEY].handle_command_async(interaction))
        return web.json_response(
            {"type": InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE}
        )

    return web.json_response(
        {
            "type": InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE,
            "data": {"content": "Unknown command.", "allowed_mentions": {"parse": []}},
        }
    )


def _spawn(app: web.Application, coro) -> None:
    """Run a coroutine after the response is returned, keeping a reference."""
    tasks = app[TASKS_KEY]
    task = asyncio.create_task(coro)
    tasks.add(task)
    task.add_done_callback(tasks.discard)


def _pretty_dumps(data) -> str:
    return json.dumps(data, indent=2)


async def _drain_tasks(app: web.Application) -> None:
    tasks = app[TASKS_KEY]
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)


def create_app(service: DealNotifierService, config: NotifierConfig) -> web.Application:
    """
    Build the aiohttp application.

    Args:
        service: Service handling runs, summaries and commands
        config: Configuration providing the interaction public key

    Returns:
        Configured web.Application
    """
    app = web.Application()
    app[SERVICE_KEY] = service
    app[VERIFIER_KEY] = _build_verifier(config.discord_public_key)
    app[TASKS_KEY] = set()

    app.router.add_get("/", handle_root)
    app.router.add_route("GET", "/run", handle_run)
    app.router.add_route("POST", "/run", handle_run)
    app.router.add_post("/interactions", handle_interaction)
    app.on_shutdown.append(_drain_tasks)

    return app
