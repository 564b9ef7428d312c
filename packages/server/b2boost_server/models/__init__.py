# Document models: the single definition of the stored record shapes.
from .base import Document, TimestampMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .user import User, split_name  # noqa: F401
