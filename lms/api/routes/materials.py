"""API routes for materials (file upload/download/link/delete)."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from lms.api.deps import get_owned_lesson
from lms.core.auth import get_current_identity, require_instructor
from lms.core.config import get_settings
from lms.core.database import get_db
from lms.core.exceptions import InvalidError, NotFoundError
from lms.models.material import LessonMaterial, Material
from lms.schemas.material import MaterialResponse
from lms.schemas.user import Identity
from lms.services.storage import MaterialStorage, get_storage, safe_file_name

logger = logging.getLogger(__name__)
router = APIRouter()


def get_material_or_404(db: Session, material_id: int) -> Material:
    material = db.get(Material, material_id)
    if not material:
        raise NotFoundError("Material not found")
    return material


@router.get("/", response_model=List[MaterialResponse])
def list_materials(_: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return db.query(Material).order_by(Material.created_at.desc(), Material.id.desc()).all()


@router.post("/", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
async def upload_material(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
    storage: MaterialStorage = Depends(get_storage),
):
    """
    Upload a material file.

    - Bytes are written to the upload directory, metadata to the database
    - Maximum file size comes from MAX_UPLOAD_MB
    """
    settings = get_settings()
    content = await file.read()
    if not content:
        raise InvalidError("No file uploaded")
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.max_upload_mb}MB",
        )

    file_name = safe_file_name(file.filename)
    if file_name is None:
        raise InvalidError("Invalid file name")
    path = storage.save(file_name, content)

    try:
        material = Material(
            title=title or file_name,
            file_name=file_name,
            file_path=str(path),
            file_size=len(content),
            file_type=file.content_type or "application/octet-stream",
            uploaded_by=identity.user_id,
        )
        db.add(material)
        db.commit()
        db.refresh(material)
        logger.info(f"Material uploaded: {material.id} by user {identity.user_id}")
        return material
    except SQLAlchemyError as e:
        # Clean up the stored file if the database write fails
        storage.delete(str(path))
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")


@router.get("/{material_id}/download")
def download_material(
    material_id: int,
    _: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
    storage: MaterialStorage = Depends(get_storage),
):
    material = get_material_or_404(db, material_id)
    if not storage.exists(material.file_path):
        raise NotFoundError("File not found")
    return FileResponse(material.file_path, media_type=material.file_type, filename=material.file_name)


@router.post("/{material_id}/link/{lesson_id}")
def link_material(
    material_id: int,
    lesson_id: int,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    get_material_or_404(db, material_id)
    get_owned_lesson(db, lesson_id, identity)

    existing = db.query(LessonMaterial).filter(
        LessonMaterial.material_id == material_id,
        LessonMaterial.lesson_id == lesson_id,
    ).first()
    if existing:
        return {"success": True}

    try:
        db.add(LessonMaterial(material_id=material_id, lesson_id=lesson_id))
        db.commit()
        return {"success": True}
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")


@router.delete("/{material_id}/link/{lesson_id}")
def unlink_material(
    material_id: int,
    lesson_id: int,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    get_owned_lesson(db, lesson_id, identity)
    try:
        deleted = db.query(LessonMaterial).filter(
            LessonMaterial.material_id == material_id,
            LessonMaterial.lesson_id == lesson_id,
        ).delete()
        db.commit()
        return {"success": deleted > 0}
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")


@router.delete("/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_material(
    material_id: int,
    _: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
    storage: MaterialStorage = Depends(get_storage),
):
    """Delete the material record, its lesson links and the file on disk."""
    material = get_material_or_404(db, material_id)
    file_path = material.file_path
    try:
        db.delete(material)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")

    storage.delete(file_path)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
