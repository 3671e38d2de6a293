from datetime import datetime

from sqlalchemy import Column, String, Float, Date, DateTime
from app.db.base_class import Base
from app.models.user import _new_id


class Employee(Base):
    __tablename__ = "employees"  # type: ignore[assignment]

    id = Column(String(36), primary_key=True, default=_new_id)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    gender = Column(String, nullable=False)
    designation = Column(String, index=True, nullable=False)
    salary = Column(Float, nullable=False)
    date_of_joining = Column(Date, nullable=False)
    department = Column(String, index=True, nullable=False)
    employee_photo = Column(String, nullable=True)  # Hosted image URL
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Fields a caller may change through an update
    UPDATABLE_FIELDS = (
        "first_name", "last_name", "email", "gender",
        "designation", "salary", "department",
    )
