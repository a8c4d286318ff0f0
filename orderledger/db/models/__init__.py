# orderledger/db/models/__init__.py

from .owner import OwnerAccount
from .mirror_order import MirrorOrder
from .personal_order import PersonalOrder

__all__ = [
    "OwnerAccount",
    "MirrorOrder",
    "PersonalOrder",
]
