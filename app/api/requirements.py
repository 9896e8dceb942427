"""
Requirement API endpoints
"""
from fastapi import APIRouter, Depends, File, Response, UploadFile
from sqlalchemy import select
from app.api.deps import get_requirements_service
from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models.document import Document
from app.models.enums import DocumentType
from app.schemas.requirement import (
    BulkUpdateRequest,
    BulkUpdateResponse,
    LinkDocumentRequest,
    RequirementCreate,
    RequirementDetailResponse,
    RequirementFields,
    RequirementResponse,
    RequirementStatusUpdate,
    RequirementUpdate,
    RequirementValidationResult,
)
from app.services.requirements_service import RequirementsService
from app.utils.file_handling import read_upload, store_file, upload_limits

router = APIRouter()


@router.post("", response_model=RequirementResponse, status_code=201)
async def create_requirement(
    requirement_data: RequirementCreate,
    service: RequirementsService = Depends(get_requirements_service)
):
    """
    Add a requirement to an application.

    The new requirement starts pending and the application's progress is
    recomputed.

    Raises:
        404: If application not found
        422: If the requirement data is incomplete
    """
    return await service.create_requirement(requirement_data)


@router.post("/validate", response_model=RequirementValidationResult)
async def validate_requirement(
    requirement_data: RequirementFields,
    service: RequirementsService = Depends(get_requirements_service)
):
    """Check requirement data without storing anything."""
    return service.validate_requirement_data(requirement_data)


@router.patch("/bulk", response_model=BulkUpdateResponse)
async def bulk_update_requirements(
    request: BulkUpdateRequest,
    service: RequirementsService = Depends(get_requirements_service)
):
    """
    Apply one patch to many requirements.

    Status transition rules are not checked for bulk updates.

    Raises:
        400: If none of the ids matched a requirement
    """
    return await service.bulk_update_requirements(request.requirement_ids, request.patch)


@router.get("/{requirement_id}", response_model=RequirementDetailResponse)
async def get_requirement(
    requirement_id: str,
    service: RequirementsService = Depends(get_requirements_service)
):
    requirement = await service.get_requirement_by_id(requirement_id)
    if requirement is None:
        raise NotFoundError("Requirement", requirement_id)
    return requirement


@router.patch("/{requirement_id}", response_model=RequirementResponse)
async def update_requirement(
    requirement_id: str,
    requirement_data: RequirementUpdate,
    service: RequirementsService = Depends(get_requirements_service)
):
    """
    Partially update a requirement.

    Raises:
        404: If requirement, linked document or task not found
        409: If the status change is not allowed
    """
    return await service.update_requirement(requirement_id, requirement_data)


@router.delete("/{requirement_id}", status_code=204)
async def delete_requirement(
    requirement_id: str,
    service: RequirementsService = Depends(get_requirements_service)
):
    await service.delete_requirement(requirement_id)
    return Response(status_code=204)


@router.put("/{requirement_id}/status", response_model=RequirementResponse)
async def update_requirement_status(
    requirement_id: str,
    status_data: RequirementStatusUpdate,
    service: RequirementsService = Depends(get_requirements_service)
):
    """
    Move a requirement to a new status.

    Raises:
        404: If requirement not found
        409: If the transition is not allowed
    """
    return await service.update_requirement_status(requirement_id, status_data.status, status_data.notes)


@router.post("/{requirement_id}/link-document", response_model=RequirementResponse)
async def link_document(
    requirement_id: str,
    link_data: LinkDocumentRequest,
    service: RequirementsService = Depends(get_requirements_service)
):
    """Link a library document; the requirement becomes completed."""
    return await service.link_document_to_requirement(requirement_id, link_data.document_id, link_data.notes)


@router.post("/{requirement_id}/documents", response_model=RequirementResponse, status_code=201)
async def upload_requirement_document(
    requirement_id: str,
    file: UploadFile = File(...),
    service: RequirementsService = Depends(get_requirements_service)
):
    """
    Upload a file for a requirement and link it.

    Features:
    - File type and size checked against the requirement's allowedFileTypes
      and maxFileSize, falling back to the global upload settings
    - A file already in the library (same SHA256) is reused instead of stored again

    Raises:
        HTTPException 400: If file type not allowed
        404: If requirement not found
        HTTPException 413: If file size exceeds limit
    """
    db = service.session
    requirement = await service.get_requirement_by_id(requirement_id)
    if requirement is None:
        raise NotFoundError("Requirement", requirement_id)

    allowed_extensions, max_file_size = upload_limits(
        requirement.allowed_file_types,
        requirement.max_file_size,
        settings.ALLOWED_EXTENSIONS,
        settings.MAX_FILE_SIZE,
    )
    file_content, sha256_hash, mime_type = await read_upload(file, allowed_extensions, max_file_size)

    result = await db.execute(select(Document).where(Document.sha256 == sha256_hash))
    document = result.scalar_one_or_none()

    if document is None:
        stored_path = store_file(file_content, sha256_hash, file.filename, settings.BUCKET_DIR)
        document = Document(
            title=requirement.name,
            filename=file.filename,
            sha256=sha256_hash,
            mime_type=mime_type,
            size_bytes=len(file_content),
            stored_path=stored_path,
            document_type=requirement.document_type or DocumentType.OTHER,
        )
        db.add(document)
        await db.flush()

    return await service.link_document_to_requirement(requirement_id, document.id)
