from __future__ import annotations

import re

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from resume_engine.core.rate_limit import print_rate_limit, rate_limit
from resume_engine.layout import ModelError
from resume_engine.schemas.resume import (
    CanvasRequest,
    GenerateRequest,
    GenerateResponse,
    PreviewRequest,
    PrintRequest,
    ResumeResponse,
    ScoreRequest,
)
from resume_engine.schemas.scoring import AtsScoreResult
from resume_engine.services.pdf_renderer import RenderFailure
from resume_engine.services.resume_service import RecordNotFound, get_resume_service

router = APIRouter()

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._ -]+")


def _bad_model(exc: ModelError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": exc.message, "ids": list(exc.ids)},
    )


def _not_found(exc: RecordNotFound) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _safe_filename(name: str) -> str:
    cleaned = _UNSAFE_FILENAME_RE.sub("", name).strip(" .")
    if cleaned.lower().endswith(".pdf"):
        cleaned = cleaned[:-4].rstrip(" .")
    return cleaned or "resume"


@router.post("/resume/generate", response_model=GenerateResponse)
@rate_limit()
async def generate_resume(request: Request, payload: GenerateRequest):
    service = get_resume_service(request)
    try:
        record, result = service.generate(payload.template_id, payload.user_data, payload.job_description)
    except RecordNotFound as exc:
        raise _not_found(exc) from exc
    except ModelError as exc:
        raise _bad_model(exc) from exc
    return GenerateResponse(
        resume_id=record.id,
        filled_resume=record,
        ats_score=result.score,
        suggestions=result.suggestions,
        breakdown=result.breakdown,
    )


@router.post("/resume/preview", response_class=HTMLResponse)
@rate_limit()
async def preview_resume(request: Request, payload: PreviewRequest):
    try:
        html = get_resume_service(request).preview_html(payload, payload.options)
    except RecordNotFound as exc:
        raise _not_found(exc) from exc
    except ModelError as exc:
        raise _bad_model(exc) from exc
    return HTMLResponse(content=html)


@router.post("/resume/text", response_class=PlainTextResponse)
@rate_limit()
async def export_resume_text(request: Request, payload: CanvasRequest):
    try:
        text = get_resume_service(request).export_text(payload)
    except RecordNotFound as exc:
        raise _not_found(exc) from exc
    except ModelError as exc:
        raise _bad_model(exc) from exc
    return PlainTextResponse(content=text)


@router.post("/resume/score", response_model=AtsScoreResult)
@rate_limit()
async def score_resume(request: Request, payload: ScoreRequest):
    try:
        return get_resume_service(request).score_canvas(payload, payload.user_data, payload.job_description)
    except RecordNotFound as exc:
        raise _not_found(exc) from exc
    except ModelError as exc:
        raise _bad_model(exc) from exc


@router.post("/resume/print", response_class=Response)
@print_rate_limit()
async def print_resume(request: Request, payload: PrintRequest):
    try:
        pdf = await get_resume_service(request).print_pdf(payload, payload.options)
    except RecordNotFound as exc:
        raise _not_found(exc) from exc
    except ModelError as exc:
        raise _bad_model(exc) from exc
    except RenderFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to generate PDF. Please try again.",
        ) from exc
    filename = _safe_filename(payload.file_name)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}.pdf"'},
    )


@router.get("/resume/{resume_id}", response_model=ResumeResponse)
async def get_resume(request: Request, resume_id: str):
    try:
        return ResumeResponse(resume=get_resume_service(request).get_resume(resume_id))
    except RecordNotFound as exc:
        raise _not_found(exc) from exc
