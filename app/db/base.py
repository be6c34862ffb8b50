# Import all models so that Base.metadata sees every table and relationships resolve
from app.db.base_class import Base  # noqa: F401
from app.db.models.user import User  # noqa: F401
from app.db.models.place import Place  # noqa: F401
from app.db.models.friendship import Friendship  # noqa: F401
from app.db.models.pinory_share import PinoryShare  # noqa: F401
from app.db.models.friend_invitation import FriendInvitation, FriendInvitationAcceptance  # noqa: F401
