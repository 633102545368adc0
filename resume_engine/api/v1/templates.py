from __future__ import annotations

from fastapi import APIRouter, Header, HTTPException, Request, status

from resume_engine.core.rate_limit import rate_limit
from resume_engine.core.security import check_api_key
from resume_engine.layout import ModelError
from resume_engine.schemas.resume import (
    SuccessResponse,
    TemplateListResponse,
    TemplateOperationsRequest,
    TemplateResponse,
    TemplateSaveRequest,
    TemplateSaveResponse,
)
from resume_engine.services.resume_service import RecordNotFound, get_resume_service

router = APIRouter()


def _bad_model(exc: ModelError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": exc.message, "ids": list(exc.ids)},
    )


def _not_found(exc: RecordNotFound) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.post("/templates/save", response_model=TemplateSaveResponse)
@rate_limit()
async def save_template(
    request: Request,
    payload: TemplateSaveRequest,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    check_api_key(x_api_key)
    service = get_resume_service(request)
    try:
        record = service.save_template(
            payload.name,
            payload.template.elements,
            payload.template.sections,
            canvas_settings=payload.template.canvas_settings,
            template_id=payload.template_id,
        )
    except ModelError as exc:
        raise _bad_model(exc) from exc
    return TemplateSaveResponse(template_id=record.id)


@router.get("/templates", response_model=TemplateListResponse)
async def list_templates(request: Request):
    return TemplateListResponse(templates=get_resume_service(request).list_templates())


@router.get("/templates/{template_id}", response_model=TemplateResponse)
async def get_template(request: Request, template_id: str):
    try:
        return TemplateResponse(template=get_resume_service(request).get_template(template_id))
    except RecordNotFound as exc:
        raise _not_found(exc) from exc


@router.delete("/templates/{template_id}", response_model=SuccessResponse)
async def delete_template(
    request: Request,
    template_id: str,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    check_api_key(x_api_key)
    try:
        get_resume_service(request).delete_template(template_id)
    except RecordNotFound as exc:
        raise _not_found(exc) from exc
    return SuccessResponse()


@router.post("/templates/{template_id}/operations", response_model=TemplateResponse)
@rate_limit()
async def apply_template_operations(
    request: Request,
    template_id: str,
    payload: TemplateOperationsRequest,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    check_api_key(x_api_key)
    try:
        record = get_resume_service(request).apply_operations(template_id, payload.operations)
    except RecordNotFound as exc:
        raise _not_found(exc) from exc
    except ModelError as exc:
        raise _bad_model(exc) from exc
    return TemplateResponse(template=record)
