from opcc.db.database import get_session, init_db
from opcc.db.operations import (
    delete_user_collection,
    get_card_counts,
    update_card_count,
)

__all__ = [
    "delete_user_collection",
    "get_card_counts",
    "get_session",
    "init_db",
    "update_card_count",
]
