"""Project catalog router: CRUD, per-SDG listings and per-project contributions."""

from typing import List

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.projects import ProjectService
from app.modules.projects.schemas import (
    ContributionOut,
    ProjectCreate,
    ProjectOut,
    ProjectUpdate,
)
from app.modules.users import User
from app.oauth2 import get_current_user

router = APIRouter(tags=["Projects"])


@router.get("/projects", response_model=List[ProjectOut])
def list_projects(db: Session = Depends(get_db)):
    return ProjectService(db).list_projects()


@router.post("/projects", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ProjectService(db).create_project(current_user, payload)


@router.get("/projects/{project_id}", response_model=ProjectOut)
def get_project(project_id: int, db: Session = Depends(get_db)):
    return ProjectService(db).get_project(project_id)


@router.put("/projects/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ProjectService(db).update_project(project_id, current_user, payload)


@router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ProjectService(db).delete_project(project_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/projects/{project_id}/contributions", response_model=List[ContributionOut])
def project_contributions(project_id: int, db: Session = Depends(get_db)):
    return ProjectService(db).list_project_contributions(project_id)


@router.get("/sdgs/{sdg_id}/projects", response_model=List[ProjectOut])
def projects_for_sdg(
    sdg_id: int = Path(..., ge=1, le=17),
    db: Session = Depends(get_db),
):
    return ProjectService(db).list_projects_for_sdg(sdg_id)
