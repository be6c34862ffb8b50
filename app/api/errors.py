"""Translate service result error codes into HTTP responses."""

from typing import Any, Dict, Optional

from fastapi import HTTPException

ERROR_STATUS: Dict[str, int] = {
	"UNAUTHENTICATED": 401,
	"NOT_OWNER": 403,
	"FORBIDDEN": 403,
	"REQUEST_FORBIDDEN": 403,
	"ACCESS_DENIED": 403,
	"PLACE_NOT_FOUND": 404,
	"SHARE_NOT_FOUND": 404,
	"FRIENDSHIP_NOT_FOUND": 404,
	"USER_NOT_FOUND": 404,
	"ALREADY_FRIENDS": 409,
	"REQUEST_ALREADY_SENT": 409,
	"SELF_REQUEST": 400,
	"INVALID_INPUT": 400,
	"REQUEST_NOT_PENDING": 400,
	"SHARE_EXPIRED": 410,
	"SHARE_REVOKED": 410,
	"INVITATION_NOT_FOUND": 404,
	"INVITATION_UNAVAILABLE": 410,
	"SLUG_EXHAUSTED": 503,
	"INVITE_CODE_EXHAUSTED": 503,
}


def status_for(error_code: Optional[str]) -> int:
	return ERROR_STATUS.get(error_code or "", 500)


def raise_for_result(result: Any) -> None:
	"""Raise an HTTPException for a failed service result object."""
	if result.success:
		return
	detail: Dict[str, Any] = {"error_code": result.error_code, "message": result.message}
	raise HTTPException(status_code=status_for(result.error_code), detail=detail)
