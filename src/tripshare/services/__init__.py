"""
Business services for Trip Share.

- companions.py: CompanionStore, one row per direction of a companion pair
- attendees.py: AttendeeStore, per-item attendance records
- permissions.py: PermissionResolver, creator > owner > attendee > companion
- cascade.py: CascadeEngine, trip-to-item attendee propagation
- sharing.py: SharingService, the operations exposed to clients
- migration.py: Alembic runner for the migrate Lambda
"""

from tripshare.services.attendees import AttendeeStore
from tripshare.services.cascade import CascadeEngine
from tripshare.services.companions import CompanionStore
from tripshare.services.permissions import PermissionResolver
from tripshare.services.sharing import SharingService

__all__ = ["AttendeeStore", "CascadeEngine", "CompanionStore", "PermissionResolver", "SharingService"]
