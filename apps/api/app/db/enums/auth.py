"""Auth-related enums."""

from enum import Enum


class Role(str, Enum):
    """
    Resident roles.

    - RESIDENT: Default role after registration
    - SECURITY: Gate staff (visitor management)
    - FACILITY_MANAGER: Owns maintenance tasks, closes issues
    - ADMIN: Community admin (announcements, approvals, event management)
    - SUPERADMIN: Admin plus resident and role management
    """

    RESIDENT = "RESIDENT"
    SECURITY = "SECURITY"
    FACILITY_MANAGER = "FACILITY_MANAGER"
    ADMIN = "ADMIN"
    SUPERADMIN = "SUPERADMIN"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class ResidentType(str, Enum):
    """How a resident occupies their flat."""

    OWNER = "OWNER"
    TENANT = "TENANT"
