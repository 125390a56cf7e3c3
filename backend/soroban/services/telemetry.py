import time
import json
import logging
import asyncio
from typing import Optional
from functools import wraps

logger = logging.getLogger("soroban.telemetry")


def emit_event(event: str, *, route: str, version: str, family: Optional[str] = None,
               error_type: Optional[str] = None, latency_ms: Optional[int] = None,
               ok: Optional[bool] = None, attempts: Optional[int] = None,
               best_effort: Optional[bool] = None) -> dict:
    payload = {
        "event": event,
        "route": route,
        "version": version,
        "family": family,
        "error_type": error_type,
        "latency_ms": latency_ms,
        "ok": ok,
        "attempts": attempts,
        "best_effort": best_effort,
        "ts": time.time(),
    }
    # single-line JSON so log shippers can parse it
    logger.info("telemetry=%s", json.dumps(payload, separators=(",", ":")))
    return payload


def emit_generation(example, *, route: str, version: str, family: str) -> dict:
    """Log how hard the search had to work for one example."""
    return emit_event(
        "example_generated", route=route, version=version, family=family,
        attempts=example.attempts, best_effort=example.best_effort, ok=True,
    )


def _report(route: str, version: str, t0: float, err: Optional[str]) -> None:
    dt = int((time.time() - t0) * 1000)
    emit_event("api_call", route=route, version=version, latency_ms=dt, ok=err is None,
               error_type=err)


def instrument(route: str, version: str):
    def deco(fn):
        if asyncio.iscoroutinefunction(fn):
            @wraps(fn)
            async def wrapped_async(*args, **kwargs):
                t0 = time.time()
                err = None
                try:
                    return await fn(*args, **kwargs)
                except Exception as e:
                    err = e.__class__.__name__
                    raise
                finally:
                    _report(route, version, t0, err)
            return wrapped_async

        @wraps(fn)
        def wrapped(*args, **kwargs):
            t0 = time.time()
            err = None
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                err = e.__class__.__name__
                raise
            finally:
                _report(route, version, t0, err)
        return wrapped
    return deco
