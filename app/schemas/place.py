from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class PlaceSummary(BaseModel):
	id: int
	name: str
	address: Optional[str] = None
	lat: Optional[float] = None
	lng: Optional[float] = None

	model_config = ConfigDict(from_attributes=True)


class PlaceSnapshot(PlaceSummary):
	"""Content returned to a viewer who passed the access check."""
	note: Optional[str] = None
	visibility: str
	created_by: int
	created_at: datetime
	updated_at: datetime
