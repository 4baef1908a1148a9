"""
Employee Service - employee list and PIN gate
"""
from typing import List
from sqlalchemy.orm import Session

from atams.logging import get_logger
from attendance_kiosk.core.config import settings
from attendance_kiosk.repositories.employee_repository import EmployeeRepository
from attendance_kiosk.schemas.employee import Employee, PinVerifyRequest, HandoffResponse
from attendance_kiosk.services.handoff_service import HandoffService
from atams.exceptions import (
    NotFoundException,
    BadRequestException,
    ForbiddenException,
)

logger = get_logger(__name__)

PIN_LENGTH = 4


class EmployeeService:
    def __init__(self) -> None:
        self.repo = EmployeeRepository()
        self.handoff_service = HandoffService()

    def list_employees(self, db: Session, attendance_type: str = "On-Site", search: str = "") -> List[Employee]:
        # WFH attendance is limited to the WFH allow-list
        names = settings.wfh_employee_names if attendance_type == "WFH" else None
        employees = self.repo.get_employees_with_search(db, search=search.strip(), names=names)
        return [Employee.model_validate(e) for e in employees]

    def get_employee(self, db: Session, em_id: str) -> Employee:
        employee = self.repo.get_by_id(db, em_id)
        if not employee:
            raise NotFoundException("Employee not found")
        return Employee.model_validate(employee)

    def verify_pin(self, db: Session, em_id: str, request: PinVerifyRequest) -> HandoffResponse:
        """
        Check the PIN and hand the employee over to the profile screen

        Employees on the PIN allow-list must enter their own code; everyone
        else is accepted with any 4-digit PIN.

        Raises:
            NotFoundException: Unknown employee
            BadRequestException: Wrong length or wrong PIN
            ForbiddenException: WFH requested for an employee not enabled for it
        """
        employee = self.get_employee(db, em_id)

        if len(request.pin) != PIN_LENGTH or not request.pin.isdigit():
            raise BadRequestException("Please enter a 4-digit PIN")

        name_key = employee.em_name.upper()

        if request.attendance_type == "WFH" and name_key not in settings.wfh_employee_names:
            raise ForbiddenException(f"{employee.em_name} is not enabled for WFH attendance")

        required_pin = settings.employee_pins_map.get(name_key)
        if required_pin is not None and request.pin != required_pin:
            logger.info(
                "Rejected PIN",
                extra={'extra_data': {'employee_id': employee.em_id}}
            )
            raise BadRequestException("Invalid PIN. Please try again.")

        handoff = self.handoff_service.issue(
            employee.em_id, employee.em_name, request.attendance_type
        )

        return HandoffResponse(
            handoff_token=handoff["token"],
            expires_in=handoff["expires_in"],
            payload=handoff["payload"],
            message=f"{request.attendance_type} attendance marked for {employee.em_name}"
        )
