"""Function entrypoint: dispatch one rebuild run and always report back."""

from __future__ import annotations

import asyncio
import json
import tempfile
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from pathlib import Path
from typing import Any

from routesnap.config import LoggingSettings, load_settings
from routesnap.engine import FanoutEngine, RunReport
from routesnap.index import TagIndex
from routesnap.log import RunLog, configure_logging
from routesnap.renderer import RouteRenderer
from routesnap.schema import Invalid, parse_dependencies_json
from routesnap.types import Dependencies
from routesnap.upstream import UpstreamClient

EngineFactory = Callable[[RunLog], AbstractAsyncContextManager[FanoutEngine]]

_logging_configured = False


def parse_trigger(event: object, log: RunLog) -> Dependencies | None:
    """Changed dependencies carried by the invocation, if any.

    Anything other than a valid dependency set in a string ``body`` means a
    full rebuild.
    """
    if not isinstance(event, dict):
        return None
    body = event.get("body")
    if not isinstance(body, str):
        return None
    result = parse_dependencies_json(body)
    if isinstance(result, Invalid):
        log.info(
            "body_not_dependencies",
            reason=result.reason,
            fallback="render all",
        )
        return None
    return result.value


@asynccontextmanager
async def aws_engine(log: RunLog) -> AsyncIterator[FanoutEngine]:
    """Engine wired to the upstream API and the AWS resources from settings."""
    from routesnap.adapters.aws import (
        AsyncCloudFrontCdn,
        AsyncDynamoIndexStore,
        AsyncS3SnapshotStore,
    )

    settings = load_settings()
    upstream = UpstreamClient(
        settings.uniform_api_key,
        origin=settings.uniform_origin,
        route_origin=settings.uniform_route_origin,
    )
    try:
        yield FanoutEngine(
            project_id=settings.uniform_project_id,
            discovery=upstream,
            renderer=RouteRenderer(upstream),
            store=AsyncS3SnapshotStore(settings.bucket_name),
            index=TagIndex(AsyncDynamoIndexStore(settings.mapping_table_name)),
            cdn=AsyncCloudFrontCdn(settings.distribution_id),
            log=log,
            concurrency=settings.render_concurrency,
        )
    finally:
        await upstream.disconnect()


def _response(
    dependencies: Dependencies | None, report: RunReport | None, log: RunLog
) -> dict[str, Any]:
    body = {
        "dependencies": dependencies,
        "mode": "partial" if dependencies is not None else "full",
        "outcome": report.outcome if report is not None else "failed",
        "report": report.to_dict() if report is not None else None,
        "logs": log.entries,
    }
    # Always 200 so the caller receives the log, even for a failed run
    return {
        "statusCode": 200,
        "body": json.dumps(body, default=str),
        "headers": {"content-type": "application/json"},
    }


async def handle(
    event: object,
    *,
    engine_factory: EngineFactory = aws_engine,
    log: RunLog | None = None,
) -> dict[str, Any]:
    """Run a partial rebuild if the event carries changed dependencies,
    otherwise a full rebuild."""
    log = log or RunLog()
    dependencies = parse_trigger(event, log)
    report: RunReport | None = None

    try:
        with tempfile.TemporaryDirectory(prefix="routesnap-") as staging:
            log.info("staging_dir_created", dir=staging)
            async with engine_factory(log) as engine:
                if dependencies is not None:
                    report = await engine.render_affected(dependencies)
                else:
                    report = await engine.render_and_sync_all(Path(staging))
            log.info("staging_dir_removed", dir=staging)
    except Exception as e:
        log.error("render_and_sync_failed", error=f"{type(e).__name__}: {e}")

    return _response(dependencies, report, log)


def lambda_handler(event: object, context: object = None) -> dict[str, Any]:
    """AWS Lambda entrypoint."""
    global _logging_configured
    if not _logging_configured:
        settings = LoggingSettings()
        configure_logging(settings.log_level, settings.log_format)
        _logging_configured = True
    return asyncio.run(handle(event))
