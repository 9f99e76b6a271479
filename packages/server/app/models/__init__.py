# SQLModel definitions, imported here so Alembic sees the full metadata.
from .base import CreatedAtMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .user import Profile  # noqa: F401
from .user_org import Membership  # noqa: F401
from .invite import Invite  # noqa: F401
from .org_request import OrgRequest  # noqa: F401
from .notification import Notification  # noqa: F401
