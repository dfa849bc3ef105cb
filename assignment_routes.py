from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from auth import get_current_user, require_roles
from database import get_db
from assignment_schema import CreateAssignment, PatchAssignment
import assignment_service

router = APIRouter(prefix="/assignments", tags=["assignments"], dependencies=[Depends(get_current_user)])

view_roles = require_roles("admin", "accountant", "driver")


@router.get("", dependencies=[Depends(view_roles)])
def list_assignments(
    vehicle_id: Optional[int] = Query(None, gt=0),
    employee_id: Optional[int] = Query(None, gt=0),
    active: Optional[Literal["true", "false"]] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    return assignment_service.list_assignments(
        db,
        vehicle_id=vehicle_id,
        employee_id=employee_id,
        active=None if active is None else active == "true",
        limit=limit,
        offset=offset,
    )


@router.get("/{assignment_id}", dependencies=[Depends(view_roles)])
def get_assignment(assignment_id: int, db: Session = Depends(get_db)):
    return assignment_service.get_assignment(db, assignment_id)


@router.post("", status_code=201, dependencies=[Depends(require_roles("admin"))])
def create_assignment(assignment: CreateAssignment, db: Session = Depends(get_db)):
    return assignment_service.create_assignment(db, assignment.model_dump())


@router.patch("/{assignment_id}", dependencies=[Depends(require_roles("admin"))])
def update_assignment(assignment_id: int, assignment: PatchAssignment, db: Session = Depends(get_db)):
    return assignment_service.update_assignment(db, assignment_id, assignment.model_dump(exclude_unset=True))


@router.delete("/{assignment_id}", status_code=204, dependencies=[Depends(require_roles("admin"))])
def delete_assignment(assignment_id: int, db: Session = Depends(get_db)):
    assignment_service.delete_assignment(db, assignment_id)
    return Response(status_code=204)
