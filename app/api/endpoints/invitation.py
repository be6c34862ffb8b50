from typing import Optional

from fastapi import Depends, Query
from app.api.router import create_router
from sqlalchemy.orm import Session
from app.api.dependencies.database import get_db
from app.api.dependencies.auth import get_optional_user, user_id_of
from app.api.dependencies.origin import get_base_url
from app.api.dependencies.services import get_invitation_service
from app.api.errors import raise_for_result
from app.db.models.user import User
from app.services.invitation_services import InvitationService
from app.schemas.invitation import (
	AcceptInvitationInput,
	AcceptedInvitationRead,
	InvitationInfo,
	InvitationRead,
)

router = create_router(name="invitation")

@router.get("", response_model=InvitationRead)
def get_invitation(
	db: Session = Depends(get_db),
	current_user: Optional[User] = Depends(get_optional_user),
	base_url: str = Depends(get_base_url),
	invitation_service: InvitationService = Depends(get_invitation_service)
):
	"""
	Get the caller's invitation link, creating it on first use.
	"""
	result = invitation_service.get_or_create_invitation(user_id_of(current_user), db, base_url=base_url)
	raise_for_result(result)
	return result.data

@router.delete("")
def deactivate_invitation(
	db: Session = Depends(get_db),
	current_user: Optional[User] = Depends(get_optional_user),
	invitation_service: InvitationService = Depends(get_invitation_service)
):
	"""
	Deactivate the caller's invitation link. The next GET issues a new code.
	"""
	result = invitation_service.deactivate_invitation(user_id_of(current_user), db)
	raise_for_result(result)
	return result.data

@router.get("/info", response_model=InvitationInfo)
def get_invitation_info(
	code: Optional[str] = Query(None, max_length=64),
	invitation_service: InvitationService = Depends(get_invitation_service)
):
	"""
	Show who is behind an invite code. No sign-in needed.
	"""
	result = invitation_service.get_invitation_info(code)
	raise_for_result(result)
	return result.data

@router.post("/accept", response_model=AcceptedInvitationRead)
def accept_invitation(
	accept_in: AcceptInvitationInput,
	db: Session = Depends(get_db),
	current_user: Optional[User] = Depends(get_optional_user),
	invitation_service: InvitationService = Depends(get_invitation_service)
):
	"""
	Accept an invite code and become the inviter's friend.
	"""
	result = invitation_service.accept_invitation(user_id_of(current_user), accept_in.invite_code, db)
	raise_for_result(result)
	return result.data
