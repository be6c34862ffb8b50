"""Share slug and invite code generation.

Slugs are fixed-length tokens over the URL-safe alphabet ``A-Za-z0-9_-``
drawn from ``secrets``. Ten characters give 60 bits of entropy. Invite codes
are shorter and meant to be read aloud or typed, so they use upper case
letters and digits only.
"""

import re
import secrets
import string
from typing import Callable

from app.core.config import settings

SLUG_ALPHABET = string.ascii_letters + string.digits + "_-"
# Upper case without look-alikes (0/O, 1/I)
INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


class UniqueSlugError(Exception):
	"""Every generated candidate collided with an existing slug."""

	def __init__(self, attempts: int):
		super().__init__(f"No unique token after {attempts} attempts")
		self.attempts = attempts


def generate_slug(length: int | None = None) -> str:
	size = length or settings.SHARE_SLUG_LENGTH
	return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(size))


def generate_unique_slug(
	exists: Callable[[str], bool],
	max_attempts: int | None = None,
	generator: Callable[[], str] = generate_slug,
) -> str:
	"""Generate a slug for which ``exists(slug)`` is false.

	Raises:
		UniqueSlugError: if ``max_attempts`` candidates all collide
	"""
	attempts = max_attempts or settings.SHARE_SLUG_MAX_ATTEMPTS
	for _ in range(attempts):
		candidate = generator()
		if not exists(candidate):
			return candidate
	raise UniqueSlugError(attempts)


def is_valid_slug(slug: str | None, length: int | None = None) -> bool:
	if not slug:
		return False
	size = length or settings.SHARE_SLUG_LENGTH
	return re.fullmatch(rf"[A-Za-z0-9_-]{{{size}}}", slug) is not None


def generate_invite_code(length: int | None = None) -> str:
	size = length or settings.INVITE_CODE_LENGTH
	return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(size))
