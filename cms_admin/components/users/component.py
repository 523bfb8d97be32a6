from cms_admin.components.store import EntityStore
from cms_admin.core.entities import User
from cms_admin.core.envelopes import LEGACY, LIST_PAGE


class UserStore(EntityStore[User]):
    """Admin user accounts. New accounts go through the register endpoint."""

    record_type = User
    label = "user"
    plural = "users"
    collection_path = "users"
    create_path = "users/register"
    envelope = LEGACY
    page_format = LIST_PAGE
    create_strategy = "refresh"
