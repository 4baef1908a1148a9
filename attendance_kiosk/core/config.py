import json
from typing import Dict, List
from zoneinfo import ZoneInfo

from atams import AtamsBaseSettings


class Settings(AtamsBaseSettings):
    """
    Application Settings

    Inherits from AtamsBaseSettings which includes:
    - DATABASE_URL (required)
    - ATLAS_SSO_URL, ATLAS_APP_CODE, ATLAS_ENCRYPTION_KEY, ATLAS_ENCRYPTION_IV
    - ENCRYPTION_ENABLED, ENCRYPTION_KEY, ENCRYPTION_IV (response encryption)
    - LOGGING_ENABLED, LOG_LEVEL, LOG_TO_FILE, LOG_FILE_PATH
    - CORS_ORIGINS, CORS_ALLOW_CREDENTIALS, CORS_ALLOW_METHODS, CORS_ALLOW_HEADERS
    - RATE_LIMIT_ENABLED, RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW
    - DEBUG

    All settings can be overridden via .env file or by redefining them here.
    """
    APP_NAME: str = "Attendance Kiosk"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Session / overtime rules
    KIOSK_TIMEZONE: str = "Asia/Manila"
    OVERTIME_THRESHOLD_HOURS: float = 9
    SESSION_CARRYOVER_HOURS: int = 24

    # Screen handoff token
    HANDOFF_JWT_SECRET: str
    HANDOFF_JWT_ALG: str = "HS256"
    HANDOFF_TTL_SECONDS: int = 3600

    # PIN allow-list: {"EMPLOYEE NAME": "1234"}; everyone else accepts any 4 digits
    EMPLOYEE_PINS: str = '{"DOMINIC OCTUBRE RAMOS": "0218", "ESPERANZA RAMOS": "1427"}'
    # Employees allowed to mark WFH attendance
    WFH_EMPLOYEES: str = '["DOMINIC OCTUBRE RAMOS", "ESPERANZA RAMOS"]'

    # Reverse geocoding
    REVERSE_GEOCODE_ENABLED: bool = True
    REVERSE_GEOCODE_URL: str = "https://nominatim.openstreetmap.org/reverse"
    REVERSE_GEOCODE_TIMEOUT_SECONDS: float = 5.0
    REVERSE_GEOCODE_USER_AGENT: str = "attendance-kiosk/1.0"

    # Live profile channel
    CLOCK_TICK_SECONDS: float = 1.0

    @property
    def kiosk_tz(self) -> ZoneInfo:
        return ZoneInfo(self.KIOSK_TIMEZONE)

    @property
    def employee_pins_map(self) -> Dict[str, str]:
        """Parse EMPLOYEE_PINS, keys upper-cased for name matching"""
        try:
            pins = json.loads(self.EMPLOYEE_PINS)
        except json.JSONDecodeError:
            return {}
        return {str(name).upper(): str(pin) for name, pin in pins.items()}

    @property
    def wfh_employee_names(self) -> List[str]:
        try:
            names = json.loads(self.WFH_EMPLOYEES)
        except json.JSONDecodeError:
            return []
        return [str(name).upper() for name in names]


settings = Settings()
