#!/usr/bin/env python3
"""Kiosk avatar – conversational core for a walk-up avatar. Entry: parse args, load catalog, run a session."""

import argparse
import asyncio
import logging
import sys

from catalog import CatalogError, load_catalog
from config import settings
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Kiosk avatar – greets visitors, presents ERP modules and answers topic questions"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--dry-run", action="store_true", help="Only validate config and catalog, then exit")
    parser.add_argument(
        "--catalog",
        metavar="PATH",
        default=settings.CATALOG_PATH,
        help="Catalog JSON (modules, topics, backgrounds); default: built-in content",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Terminal kiosk: type utterances; /yes /no /ended /close /reset /quit stand in for buttons.",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run FastAPI server + orchestrator: WebSocket bridge and REST API for the kiosk page.",
    )
    return parser.parse_args(argv)


def _handle_console(catalog) -> None:
    """Run one session against stdin/stdout until /quit or EOF."""
    from avatar.console import QUIT, ConsoleMediaPresenter, ConsoleSpeechActor, console_event
    from orchestrator import KioskOrchestrator

    async def _run():
        orchestrator = KioskOrchestrator(catalog, ConsoleSpeechActor(), ConsoleMediaPresenter())
        task = asyncio.create_task(orchestrator.run())
        loop = asyncio.get_running_loop()
        try:
            while True:
                # Blocking read off the loop so timers (idle prompt, media fallback) keep firing
                line = await loop.run_in_executor(None, sys.stdin.readline)
                if not line or line.strip().lower() == QUIT:
                    break
                event = console_event(line)
                if event is not None:
                    orchestrator.submit(event)
            # Let the avatar finish what was already asked
            await orchestrator.queue.join()
        finally:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        pass


def _handle_serve(catalog) -> None:
    """Run FastAPI (uvicorn) + orchestrator in one process.

    The orchestrator runs as an asyncio task alongside the ASGI server and
    shares its event queue with the bridge, so WebSocket clients inject
    events and receive status/reply/display broadcasts.  Speech goes through
    HeyGen when an API key is configured, otherwise through the kiosk page.
    """
    import uvicorn
    from orchestrator import run_orchestrator
    from server.app import app
    from server.bridge import BridgeMediaPresenter, BridgeSpeechActor, bridge

    async def _run_all():
        # Shared event queue between orchestrator and bridge
        event_queue: asyncio.Queue = asyncio.Queue()
        bridge.set_event_queue(event_queue)

        speech = None
        if settings.heygen_enabled():
            from avatar.heygen_client import HeyGenSpeechActor

            speech = HeyGenSpeechActor(settings.HEYGEN_API_KEY)
            if await speech.open():
                bridge.set_avatar_session(speech.session_info)
            else:
                logger.warning("HeyGen unavailable; the kiosk page will speak instead")
                speech = None
        if speech is None:
            speech = BridgeSpeechActor(bridge)
        # The greeting waits for the first kiosk page
        bridge.start_session_on_connect()

        ssl_kwargs = {}
        if settings.KIOSK_HTTPS_CERT and settings.KIOSK_HTTPS_KEY:
            ssl_kwargs["ssl_certfile"] = settings.KIOSK_HTTPS_CERT
            ssl_kwargs["ssl_keyfile"] = settings.KIOSK_HTTPS_KEY

        config = uvicorn.Config(
            app,
            host=settings.KIOSK_SERVE_HOST,
            port=settings.KIOSK_SERVE_PORT,
            log_level="info",
            **ssl_kwargs,
        )
        server = uvicorn.Server(config)

        orch_task = asyncio.create_task(
            run_orchestrator(
                catalog,
                speech,
                BridgeMediaPresenter(bridge),
                event_queue=event_queue,
                bridge=bridge,
                status_callback=bridge.send_status,
                greet_on_start=False,
            )
        )
        server_task = asyncio.create_task(server.serve())

        logger.info(
            "Kiosk serving on %s:%s (orchestrator + API + WS)",
            settings.KIOSK_SERVE_HOST,
            settings.KIOSK_SERVE_PORT,
        )
        try:
            await asyncio.gather(server_task, orch_task)
        except (KeyboardInterrupt, asyncio.CancelledError):
            server.should_exit = True
            orch_task.cancel()
        finally:
            if hasattr(speech, "close"):
                await speech.close()

    asyncio.run(_run_all())


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        catalog = load_catalog(args.catalog)
    except CatalogError as e:
        logger.error("Invalid catalog: %s", e)
        return 1

    if args.dry_run:
        logger.info(
            "Dry run: config OK, project_root=%s, catalog=%s",
            settings.PROJECT_ROOT,
            args.catalog or "built-in",
        )
        logger.info(
            "Catalog: %d modules, %d topics, %d backgrounds",
            len(catalog.modules), len(catalog.topics), len(catalog.backgrounds),
        )
        logger.info(
            "Watchdog: idle %d ms, prompt %d ms; media fallback %.0f s",
            settings.IDLE_TIMEOUT_MS, settings.PROMPT_TIMEOUT_MS, settings.MEDIA_FALLBACK_SEC,
        )
        if settings.heygen_enabled():
            logger.info("HeyGen avatar: %s (%s)", settings.HEYGEN_AVATAR_NAME, settings.HEYGEN_BASE_URL)
        else:
            logger.info("HeyGen key not set; --serve will use browser speech")
        return 0

    if args.console:
        _handle_console(catalog)
        return 0

    if args.serve:
        _handle_serve(catalog)
        return 0

    logger.info("Kiosk idle. Use --console (terminal session), --serve (kiosk page), or --dry-run.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
