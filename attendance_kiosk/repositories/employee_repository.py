"""
Employee Repository - Data access layer for the kiosk employee directory
"""
from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import func, or_

from atams.db import BaseRepository
from attendance_kiosk.models.employee import Employee


class EmployeeRepository(BaseRepository[Employee]):
    def __init__(self):
        super().__init__(Employee)

    def get_by_id(self, db: Session, employee_id: str) -> Optional[Employee]:
        """Get employee by ID using ORM"""
        return db.query(Employee).filter(Employee.em_id == employee_id).first()

    def get_employees_with_search(
        self,
        db: Session,
        search: str = "",
        names: Optional[List[str]] = None
    ) -> List[Employee]:
        """
        Get employees matching search on name or ID using ORM.
        When names is given, only employees whose upper-cased name is listed are returned.
        """
        query = db.query(Employee)

        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(Employee.em_name).like(pattern),
                    func.lower(Employee.em_id).like(pattern)
                )
            )

        if names is not None:
            query = query.filter(func.upper(Employee.em_name).in_(names))

        return query.order_by(Employee.em_name.asc()).all()
