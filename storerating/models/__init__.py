"""ORM models; importing the package registers every table on ``Base.metadata``."""

from storerating.models.rating import Rating
from storerating.models.store import Store
from storerating.models.user import Role, User

__all__ = ["Rating", "Role", "Store", "User"]
