"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per entity
    - All models imported here so Base.metadata is complete before create_all or
      alembic autogenerate runs
"""

from epetitions.models.site import Site  # noqa: F401
from epetitions.models.petition import Petition  # noqa: F401
from epetitions.models.signature import Signature  # noqa: F401
from epetitions.models.email_receipt import (  # noqa: F401
    EmailRequestedReceipt, EmailSentReceipt,
)
from epetitions.models.admin_user import AdminUser  # noqa: F401
