"""
Handoff Service - signed state passed from the employee list to the profile screen
"""
import jwt
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from attendance_kiosk.core.clock import display_date, display_time
from attendance_kiosk.core.config import settings
from attendance_kiosk.schemas.employee import HandoffPayload
from atams.exceptions import UnauthorizedException

HANDOFF_ISSUER = "attendance-kiosk"
MISSING_HANDOFF_MESSAGE = "No employee data found. Redirecting..."


class HandoffService:
    def __init__(self) -> None:
        self.secret = settings.HANDOFF_JWT_SECRET
        self.algorithm = settings.HANDOFF_JWT_ALG
        self.ttl_seconds = settings.HANDOFF_TTL_SECONDS
        self.tz = settings.kiosk_tz

    def issue(
        self,
        employee_id: str,
        employee_name: str,
        attendance_type: str,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Issue handoff token after a successful PIN check

        Returns:
            dict: {token: str, expires_in: int, payload: HandoffPayload}
        """
        now = now or datetime.now(timezone.utc)
        local_now = now.astimezone(self.tz)
        exp = now + timedelta(seconds=self.ttl_seconds)

        handoff = HandoffPayload(
            employee_id=employee_id,
            employee_name=employee_name,
            attendance_type=attendance_type,
            timestamp=now,
            date=display_date(local_now),
            time=display_time(local_now),
        )

        claims = {
            "iss": HANDOFF_ISSUER,
            "sub": employee_id,
            "jti": str(uuid.uuid4()),
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
            "handoff": handoff.model_dump(mode="json"),
        }

        token = jwt.encode(claims, self.secret, algorithm=self.algorithm)

        return {
            "token": token,
            "expires_in": self.ttl_seconds,
            "payload": handoff
        }

    def read(self, token: Optional[str]) -> HandoffPayload:
        """
        Verify and decode the handoff token presented by the profile screen

        Raises:
            UnauthorizedException: If the token is missing, expired or corrupt;
                details tell the kiosk to go back to the home screen
        """
        if not token:
            raise self._redirect_home("missing")

        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["iss", "sub", "exp", "handoff"]},
                issuer=HANDOFF_ISSUER,
            )
        except jwt.ExpiredSignatureError:
            raise self._redirect_home("expired")
        except jwt.InvalidTokenError as e:
            raise self._redirect_home(f"invalid: {str(e)}")

        try:
            payload = HandoffPayload.model_validate(claims["handoff"])
        except ValueError:
            raise self._redirect_home("corrupt payload")

        if payload.employee_id != claims["sub"]:
            raise self._redirect_home("employee mismatch")

        return payload

    def _redirect_home(self, reason: str) -> UnauthorizedException:
        return UnauthorizedException(
            MISSING_HANDOFF_MESSAGE,
            details={"reason": reason, "redirect_to": "home"}
        )
