from typing import Optional

from fastapi import Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse

from app.api.router import create_router
from sqlalchemy.orm import Session
from app.api.dependencies.database import get_db
from app.api.dependencies.auth import get_optional_user, user_id_of
from app.api.dependencies.origin import get_base_url
from app.api.dependencies.services import get_share_service
from app.api.errors import raise_for_result, status_for
from app.db.models.user import User
from app.services.share_services import ShareService
from app.schemas.share import (
	CreateShareInput,
	ShareActionInput,
	ShareRead,
	ShareListItem,
	RevokedShareRead,
	ShareView,
	ViewType,
)

router = create_router(name="share")

@router.post("", response_model=ShareRead, status_code=201)
def create_share(
	share_in: CreateShareInput,
	response: Response,
	db: Session = Depends(get_db),
	current_user: Optional[User] = Depends(get_optional_user),
	base_url: str = Depends(get_base_url),
	share_service: ShareService = Depends(get_share_service)
):
	"""
	Create a share link for one of the caller's places.

	Returns 201 for a new link and 200 when an active link already existed.
	"""
	result = share_service.create_share(user_id_of(current_user), share_in, db, base_url=base_url)
	raise_for_result(result)
	if not result.created:
		response.status_code = status.HTTP_200_OK
	return result.data

@router.get("", response_model=list[ShareListItem])
def list_shares(
	current_user: Optional[User] = Depends(get_optional_user),
	share_service: ShareService = Depends(get_share_service)
):
	"""
	List the caller's active share links.
	"""
	result = share_service.list_shares(user_id_of(current_user))
	raise_for_result(result)
	return result.data

@router.get("/{share_slug}", response_model=ShareView)
def resolve_share(
	share_slug: str,
	db: Session = Depends(get_db),
	current_user: Optional[User] = Depends(get_optional_user),
	share_service: ShareService = Depends(get_share_service)
):
	"""
	Resolve a share link for the caller, who may be anonymous.
	"""
	result = share_service.resolve(share_slug, user_id_of(current_user), db)
	if not result.success and result.reason is not None:
		body = ShareView(
			can_view=False,
			view_type=ViewType.RESTRICTED,
			reason=result.reason,
			message=result.message
		)
		return JSONResponse(status_code=status_for(result.error_code), content=body.model_dump(mode="json"))
	raise_for_result(result)
	return ShareView(
		can_view=True,
		view_type=result.view_type,
		content=result.content,
		share_info=result.share_info
	)

@router.patch("/{share_slug}", response_model=RevokedShareRead)
def update_share(
	share_slug: str,
	action_in: ShareActionInput,
	db: Session = Depends(get_db),
	current_user: Optional[User] = Depends(get_optional_user),
	share_service: ShareService = Depends(get_share_service)
):
	"""
	Apply an action to a share link. Only ``revoke`` is supported.
	"""
	if action_in.action != "revoke":
		raise HTTPException(
			status_code=400,
			detail={"error_code": "INVALID_INPUT", "message": f"Unsupported action: {action_in.action}"}
		)
	result = share_service.revoke(share_slug, user_id_of(current_user), db)
	raise_for_result(result)
	return result.data

@router.delete("/{share_slug}")
def delete_share(
	share_slug: str,
	db: Session = Depends(get_db),
	current_user: Optional[User] = Depends(get_optional_user),
	share_service: ShareService = Depends(get_share_service)
):
	"""
	Permanently delete a share link; its slug becomes free for reuse.
	"""
	result = share_service.hard_delete(share_slug, user_id_of(current_user), db)
	raise_for_result(result)
	return result.data
