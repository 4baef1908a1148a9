"""
API Dependencies
Atlas SSO for back-office endpoints and the handoff token for kiosk screens
"""
from typing import Optional
from fastapi import Header

from atams.sso import create_atlas_client, create_auth_dependencies
from attendance_kiosk.core.config import settings
from attendance_kiosk.schemas.employee import HandoffPayload
from attendance_kiosk.services.handoff_service import HandoffService

# Initialize Atlas SSO client using factory
atlas_client = create_atlas_client(settings)

# Create auth dependencies using factory
get_current_user, require_auth, require_min_role_level, require_role_level = create_auth_dependencies(atlas_client)

handoff_service = HandoffService()


def require_handoff(
    x_kiosk_handoff: Optional[str] = Header(None, alias="X-Kiosk-Handoff")
) -> HandoffPayload:
    """Profile screens need the handoff issued by the PIN gate"""
    return handoff_service.read(x_kiosk_handoff)


__all__ = [
    "atlas_client",
    "get_current_user",
    "require_auth",
    "require_min_role_level",
    "require_role_level",
    "handoff_service",
    "require_handoff",
]
