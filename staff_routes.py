from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth import get_current_user, require_roles
from database import get_db
from user_schema import CreateStaff, UpdateStaff
import user_service

router = APIRouter(prefix="/staff", tags=["staff"], dependencies=[Depends(get_current_user)])


@router.get("")
def get_all_staff(db: Session = Depends(get_db)):
    return {"success": True, "data": user_service.list_staff(db)}


@router.get("/next-employee-number")
def get_next_employee_number(role: str = Query("driver"), db: Session = Depends(get_db)):
    return {"employeeNumber": user_service.next_employee_number(db, role)}


@router.post("", status_code=201, dependencies=[Depends(require_roles("admin"))])
def add_staff(staff: CreateStaff, db: Session = Depends(get_db)):
    return {"success": True, "data": user_service.add_staff(db, staff.model_dump())}


@router.put("/{staff_id}", dependencies=[Depends(require_roles("admin"))])
def update_staff(staff_id: int, staff: UpdateStaff, db: Session = Depends(get_db)):
    updated = user_service.update_staff(db, staff_id, staff.model_dump(exclude_unset=True))
    return {"success": True, "data": updated}


@router.delete("/{staff_id}", dependencies=[Depends(require_roles("admin"))])
def delete_staff(staff_id: int, db: Session = Depends(get_db)):
    user_service.delete_staff(db, staff_id)
    return {"success": True, "message": "Staff deleted successfully"}
