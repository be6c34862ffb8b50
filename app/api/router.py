from __future__ import annotations

from collections import defaultdict
from http import HTTPStatus
from typing import Any, Dict, List, Optional, Sequence

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.errors import ERROR_STATUS


class ErrorDetail(BaseModel):
	error_code: str
	message: Optional[str] = None


class ErrorResponse(BaseModel):
	"""Body of every failed request raised through ``raise_for_result``."""
	detail: ErrorDetail


def error_responses(error_status: Dict[str, int] = ERROR_STATUS) -> Dict[int, Dict[str, Any]]:
	"""OpenAPI ``responses`` for each status in the error map, listing its codes.

	A 500 entry is always present for unexpected failures.
	"""
	codes_by_status: Dict[int, List[str]] = defaultdict(list)
	for error_code, status_code in error_status.items():
		codes_by_status[status_code].append(error_code)

	responses: Dict[int, Dict[str, Any]] = {}
	for status_code in sorted(codes_by_status):
		codes = ", ".join(sorted(codes_by_status[status_code]))
		responses[status_code] = {
			"model": ErrorResponse,
			"description": f"{HTTPStatus(status_code).phrase}: {codes}",
		}
	responses[500] = {"description": HTTPStatus.INTERNAL_SERVER_ERROR.phrase}
	return responses


DEFAULT_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = error_responses()


def create_router(
	*,
	name: Optional[str] = None,
	dependencies: Optional[Sequence[Depends]] = None,
	extra_responses: Optional[Dict[int, Dict[str, Any]]] = None,
) -> APIRouter:
	"""APIRouter documenting the error codes its endpoints can return.

	Args:
		name: Logical name stored on the router
		dependencies: Dependencies applied to all routes in the router
		extra_responses: Entries merged over the default error responses
	"""
	router = APIRouter(
		dependencies=list(dependencies) if dependencies else None,
		responses={**DEFAULT_ERROR_RESPONSES, **(extra_responses or {})},
	)
	if name:
		router.name = name
	return router
