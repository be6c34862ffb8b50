"""View accounting for share links.

The counter is informational. Owner views are never counted and the value
only ever grows.
"""

from typing import Optional

from app.services.base import BaseService
from app.repositories.pinory_share import PinoryShareRepository
from app.db.models.pinory_share import PinoryShare


class ViewService(BaseService):
	def __init__(self, share_repo: PinoryShareRepository, correlation_id: Optional[str] = None):
		super().__init__(correlation_id)
		self._set_repositories(share_repo=share_repo)

	def record_view(self, share: PinoryShare, viewer_id: Optional[int]) -> bool:
		"""Count one view unless the viewer owns the shared place.

		Runs inside the caller's transaction.

		Returns:
			True if the counter was incremented
		"""
		if viewer_id is not None and viewer_id == share.place.created_by:
			return False
		self.share_repo.increment_view_count(share)
		self.log_operation("record_view", share_id=share.id, view_count=share.view_count, anonymous=viewer_id is None)
		return True
