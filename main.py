# main.py
import logging

from fastapi import FastAPI
from app.api.endpoints import user, friendship, invitation, share
from app.core.config import settings
from app.core.observability import RequestLoggingMiddleware
# Import all models to ensure relationships are properly resolved
from app.db import base  # This imports all models

logging.basicConfig(level=settings.LOG_LEVEL.upper())

app = FastAPI(title="Pinory")

app.add_middleware(RequestLoggingMiddleware)

app.include_router(user.router, prefix="/users", tags=["users"])
# Before the friendship router, whose "/{friendship_id}/..." routes would also match "/invite/..."
app.include_router(invitation.router, prefix="/friends/invite", tags=["friends"])
app.include_router(friendship.router, prefix="/friends", tags=["friends"])
app.include_router(share.router, prefix="/pinory/share", tags=["share"])
