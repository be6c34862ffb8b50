from __future__ import annotations

import logging
import time
import uuid
from random import random
from typing import Callable, Optional, Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.core.config import settings

logger = logging.getLogger("app.requests")


def generate_correlation_id(existing: Optional[str]) -> str:
	if existing and existing.strip():
		return existing.strip()
	return str(uuid.uuid4())


def is_sampled_out(sample_rate: float) -> bool:
	return sample_rate < 1.0 and random() > sample_rate


class RequestLoggingMiddleware(BaseHTTPMiddleware):
	"""Middleware to log inbound HTTP requests with correlation IDs."""

	async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
		correlation_id = generate_correlation_id(request.headers.get("X-Correlation-ID"))
		setattr(request.state, "correlation_id", correlation_id)

		if not settings.ENABLE_REQUEST_LOGGING:
			response = await call_next(request)
			response.headers["X-Correlation-ID"] = correlation_id
			return response

		sampled_out = is_sampled_out(float(settings.LOG_SAMPLE_RATE))
		start_ns = time.monotonic_ns()
		status_code: int = 500

		try:
			response = await call_next(request)
			status_code = response.status_code
		finally:
			duration_ms = int((time.monotonic_ns() - start_ns) / 1_000_000)
			if not sampled_out:
				logger.info(
					"%s %s -> %s (%d ms)",
					request.method,
					request.url.path,
					status_code,
					duration_ms,
					extra=build_request_fields(request, correlation_id, status_code, duration_ms)
				)

		response.headers["X-Correlation-ID"] = correlation_id
		return response


def route_template(request: Request) -> str:
	"""Path template of the matched route, with any router prefix restored.

	The route stored in the scope may carry only its own path (``/status/{user_id}``)
	without the prefix it was mounted under, so the prefix is taken from the
	leading segments of the raw path.
	"""
	raw_path = request.url.path
	# Unavailable for 404s and early errors
	route = request.scope.get("route")
	template = getattr(route, "path", None) if route is not None else None
	if template is None:
		return raw_path

	raw = raw_path.rstrip("/").split("/")
	tail = template.rstrip("/").split("/")
	if len(tail) > len(raw):
		return template
	return "/".join(raw[:len(raw) - len(tail) + 1] + tail[1:]) or "/"


def build_request_fields(request: Request, correlation_id: str, status_code: int, duration_ms: int) -> dict:
	xff = request.headers.get("x-forwarded-for")
	client_ip = (xff.split(",")[0].strip() if xff else (request.client.host if request.client else None))

	auth_header = (request.headers.get("authorization") or "").lower()
	auth_type = "bearer" if auth_header.startswith("bearer ") else "none"

	return {
		"correlation_id": correlation_id,
		"method": request.method,
		"raw_path": request.url.path,
		"path_template": route_template(request),
		"status_code": status_code,
		"duration_ms": duration_ms,
		"client_ip": client_ip,
		"user_agent": (request.headers.get("user-agent") or "")[:256],
		"auth_type": auth_type,
	}
