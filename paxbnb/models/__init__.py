"""SQLAlchemy models for PaxBnb.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from paxbnb.models.booking import Booking
from paxbnb.models.profile import Profile
from paxbnb.models.property import Property

__all__ = [
    "Booking",
    "Profile",
    "Property",
]
