from fastapi import APIRouter
from attendance_kiosk.api.v1.endpoints import kiosk, attendance

api_router = APIRouter()

# Register routes
api_router.include_router(kiosk.router, prefix="/kiosk", tags=["Kiosk"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
