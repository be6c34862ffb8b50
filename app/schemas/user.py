from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr

class UserBase(BaseModel):
	email: EmailStr
	name: Optional[str] = None

class UserRead(UserBase):
	id: int
	avatar_url: Optional[str] = None

	model_config = ConfigDict(from_attributes=True)

class UserSummary(BaseModel):
	id: int
	name: Optional[str] = None
	avatar_url: Optional[str] = None

	model_config = ConfigDict(from_attributes=True)
