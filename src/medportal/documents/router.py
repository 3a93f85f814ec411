"""FastAPI routes for the document portal.

Endpoints:
  POST   /documents        upload one PDF (multipart field ``file``)
  GET    /documents        list records, newest first
  GET    /documents/{id}   download the stored bytes
  DELETE /documents/{id}   remove blob and record
"""

from __future__ import annotations

from typing import Annotated, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import Response

from ..exceptions import ValidationError
from .schemas import DocumentListResponse, DocumentRecord, ErrorResponse, MessageResponse
from .service import DocumentService

router = APIRouter(prefix="/documents", tags=["Documents"])

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_document_service(request: Request) -> DocumentService:
    return request.app.state.document_service  # type: ignore[attr-defined]


ServiceDep = Annotated[DocumentService, Depends(get_document_service)]


def content_disposition(filename: str) -> str:
    """``attachment`` header value, RFC 5987 encoded when the name is not plain ASCII."""
    quoted = quote(filename)
    if quoted != filename or '"' in filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


@router.post(
    "",
    response_model=DocumentRecord,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
async def upload_document(
    service: ServiceDep,
    file: Optional[UploadFile] = File(None),
) -> DocumentRecord:
    """Upload a PDF document.

    Example:
        ```bash
        curl -X POST http://localhost:5000/api/documents -F "file=@report.pdf;type=application/pdf"
        ```
    """
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    # refuse before buffering the body when the size is already known
    if file.size is not None:
        service.validate_upload(file.size, file.filename, file.content_type)

    try:
        content = await file.read()
    finally:
        await file.close()
    return await service.upload(content, file.filename, file.content_type)


# Older clients post to /documents/upload
router.add_api_route(
    "/upload",
    upload_document,
    methods=["POST"],
    response_model=DocumentRecord,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)


@router.get("", response_model=DocumentListResponse, responses={500: {"model": ErrorResponse}})
async def list_documents(service: ServiceDep) -> DocumentListResponse:
    return DocumentListResponse(documents=await service.list())


@router.get(
    "/{document_id}",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}, **_ERRORS},
)
async def download_document(document_id: int, service: ServiceDep) -> Response:
    doc = await service.fetch_for_download(document_id)
    return Response(
        content=doc.content,
        media_type=doc.media_type,
        headers={"Content-Disposition": content_disposition(doc.filename)},
    )


@router.delete("/{document_id}", response_model=MessageResponse, responses=_ERRORS)
async def delete_document(document_id: int, service: ServiceDep) -> MessageResponse:
    await service.delete(document_id)
    return MessageResponse(message="Document deleted successfully")
