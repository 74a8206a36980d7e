"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Uniqueness invariants (attendance, credentials, admins) live in table constraints

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from proofpass.models.user import User  # noqa: F401
from proofpass.models.event import Event  # noqa: F401
from proofpass.models.event_admin import EventAdmin  # noqa: F401
from proofpass.models.registration import Registration  # noqa: F401
from proofpass.models.ticket_credential import TicketCredential  # noqa: F401
from proofpass.models.email_credential import EmailCredential  # noqa: F401
from proofpass.models.attendance import Attendance  # noqa: F401
from proofpass.models.signin_code import SigninCode  # noqa: F401
