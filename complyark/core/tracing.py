# complyark/core/tracing.py - Trace-aware structured logging with local trace ID fallback

import os
import socket
import traceback
import sys
import json
import random
from datetime import datetime, timezone
from typing import Optional
from loguru import logger
from contextvars import ContextVar

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

from complyark.core.config import settings

SERVICE = "complyark-api"
SERVICE_VERSION = "1.0.0"

# Context variables for manual trace propagation
_trace_id_context: ContextVar[str] = ContextVar('trace_id', default='no-trace')
_span_id_context: ContextVar[str] = ContextVar('span_id', default='no-span')

_tracer = None
_tracer_provider = None


def generate_trace_id() -> str:
    """Generate a 128-bit trace ID as 32-character hex string"""
    return f"{random.getrandbits(128):032x}"


def generate_span_id() -> str:
    """Generate a 64-bit span ID as 16-character hex string"""
    return f"{random.getrandbits(64):016x}"


class TracingMiddleware:
    """ASGI middleware that gives every request a trace context and echoes it as X-Trace-ID"""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        trace_id = None
        span_id = None

        # OpenTelemetry span created by the FastAPI instrumentation, when enabled
        if settings.ENABLE_OTEL_EXPORTER:
            span_context = trace.get_current_span().get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"
                span_id = f"{span_context.span_id:016x}"

        if not trace_id:
            trace_id = generate_trace_id()
            span_id = generate_span_id()

        _trace_id_context.set(trace_id)
        _span_id_context.set(span_id)

        async def send_with_trace(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((b"x-trace-id", trace_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_with_trace)


def setup_tracing(app, db_engine=None) -> bool:
    """Setup tracing - always provides trace IDs, OpenTelemetry on top when enabled"""
    global _tracer, _tracer_provider

    setup_structured_logging(enable_json=settings.should_use_json_logging)

    setup_logger = logger.bind(trace_id=generate_trace_id(), span_id=generate_span_id())

    if not settings.ENABLE_OTEL_EXPORTER:
        setup_logger.info("📍 OpenTelemetry disabled in config - using local trace IDs only")
        return True

    try:
        setup_logger.info("🔧 Setting up OpenTelemetry tracing...")

        resource = Resource.create({
            SERVICE_NAME: SERVICE,
            "service.version": SERVICE_VERSION,
            "service.environment": settings.ENVIRONMENT,
            "service.instance.id": f"{SERVICE}-{settings.ENVIRONMENT}"
        })

        _tracer_provider = TracerProvider(resource=resource, sampler=ALWAYS_ON)
        trace.set_tracer_provider(_tracer_provider)
        _tracer = trace.get_tracer(__name__)

        if settings.ENABLE_OTEL_CONSOLE_EXPORT:
            _tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
            setup_logger.info("✅ Console span exporter enabled")

        if settings.ENABLE_EXTERNAL_TRACING:
            otlp_exporter = OTLPSpanExporter(endpoint=settings.OTLP_ENDPOINT, insecure=True)
            _tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
            setup_logger.info(f"✅ OTLP exporter enabled: {settings.OTLP_ENDPOINT}")

        FastAPIInstrumentor.instrument_app(
            app,
            tracer_provider=_tracer_provider,
            excluded_urls="/health,/metrics,/docs,/redoc,/openapi.json"
        )
        setup_logger.info("✅ FastAPI instrumented")

        if db_engine is not None:
            instrument_database(db_engine)

        setup_logger.info("🎉 OpenTelemetry tracing setup complete")
        return True

    except Exception as e:
        setup_logger.exception(f"❌ OpenTelemetry setup failed: {e}")
        setup_logger.info("📍 Falling back to local trace IDs only")
        return True


def format_stack_trace(exception_info) -> Optional[str]:
    """Format exception stack trace for logging"""
    if not exception_info:
        return None

    if exception_info.traceback:
        return ''.join(traceback.format_exception(
            exception_info.type,
            exception_info.value,
            exception_info.traceback
        ))
    return str(exception_info.value)


def setup_structured_logging(enable_json: Optional[bool] = None):
    """Structured logging with trace context on every record"""
    if enable_json is None:
        enable_json = settings.should_use_json_logging

    logger.remove()

    hostname = socket.gethostname()
    pid = os.getpid()
    environment = settings.ENVIRONMENT

    if enable_json:
        def json_sink(message):
            record = message.record

            trace_id = record["extra"].get("trace_id") or _trace_id_context.get()
            span_id = record["extra"].get("span_id") or _span_id_context.get()

            log_entry = {
                "@timestamp": datetime.now(timezone.utc).isoformat(),
                "level": record["level"].name,
                "message": record["message"],
                "service": {
                    "name": SERVICE,
                    "version": SERVICE_VERSION,
                    "environment": environment,
                },
                "host": {"hostname": hostname},
                "process": {"pid": pid},
                "log": {
                    "origin": {
                        "file": record["file"].name,
                        "line": record["line"],
                        "function": record["function"]
                    },
                    "logger": record["name"]
                },
                "trace": {"id": trace_id, "span_id": span_id},
            }

            extra = {k: v for k, v in record["extra"].items()
                     if k not in ("trace_id", "span_id") and not k.startswith("_")}
            if extra:
                log_entry["custom"] = extra

            if record["exception"]:
                exc_type = record["exception"].type
                log_entry["error"] = {
                    "type": exc_type.__name__ if exc_type else "UnknownError",
                    "message": str(record["exception"].value),
                    "stack_trace": format_stack_trace(record["exception"]),
                }

            sys.stderr.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")
            sys.stderr.flush()

        logger.add(json_sink, level=settings.LOG_LEVEL, catch=True)
    else:
        def format_with_trace(record):
            trace_id = record["extra"].get("trace_id") or _trace_id_context.get()
            trace_info = f" [trace:{trace_id[:8]}]" if trace_id != "no-trace" else ""
            return (
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
                "<cyan>{name}:{function}:{line}</cyan>" + trace_info + " - <level>{message}</level>\n{exception}"
            )

        logger.add(
            sys.stderr,
            format=format_with_trace,
            level=settings.LOG_LEVEL,
            colorize=True,
            catch=True
        )


def instrument_database(db_engine) -> bool:
    """Add SQLAlchemy instrumentation to an async or sync engine"""
    if _tracer_provider is None:
        return False

    try:
        SQLAlchemyInstrumentor().instrument(
            engine=getattr(db_engine, 'sync_engine', db_engine),
            tracer_provider=_tracer_provider,
            enable_commenter=True
        )
        info("✅ SQLAlchemy instrumented")
        return True
    except Exception as e:
        warning(f"⚠️ SQLAlchemy instrumentation failed: {e}")
        return False


def get_current_trace_span_ids() -> tuple[str, str]:
    """Get current trace_id and span_id, generating local ones outside a request"""
    trace_id = _trace_id_context.get()
    span_id = _span_id_context.get()
    if trace_id != "no-trace" and span_id != "no-span":
        return trace_id, span_id

    trace_id = generate_trace_id()
    span_id = generate_span_id()
    _trace_id_context.set(trace_id)
    _span_id_context.set(span_id)
    return trace_id, span_id


def get_current_trace_id() -> str:
    trace_id, _ = get_current_trace_span_ids()
    return trace_id


def log_with_trace(level: str, message: str, **kwargs):
    """Log with trace context bound to the record"""
    trace_id, span_id = get_current_trace_span_ids()
    bound = logger.bind(trace_id=trace_id, span_id=span_id, **kwargs)
    getattr(bound.opt(depth=2), level.lower())(message)


def info(message: str, **kwargs):
    log_with_trace("info", message, **kwargs)


def debug(message: str, **kwargs):
    log_with_trace("debug", message, **kwargs)


def warning(message: str, **kwargs):
    log_with_trace("warning", message, **kwargs)


def error(message: str, **kwargs):
    log_with_trace("error", message, **kwargs)


__all__ = [
    'TracingMiddleware', 'setup_tracing', 'setup_structured_logging', 'get_current_trace_span_ids',
    'get_current_trace_id',
    'log_with_trace',
    'info', 'debug', 'warning', 'error'
]
