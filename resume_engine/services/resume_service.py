"""Template and resume workflows on top of the pure layout core.

``ResumeService`` owns the persistence and PDF collaborators. The pure
functions it calls raise ``ModelError`` for bad canvases; the service adds
``RecordNotFound`` for unknown ids and lets ``RenderFailure`` from the PDF
renderer propagate.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Sequence

from fastapi import Request

from resume_engine.core.config import load_ats_scoring_config, settings
from resume_engine.core.resume_store import InMemoryStore, KeyValueStore, SqliteStore
from resume_engine.layout import (
    DocumentTree,
    delete_elements,
    delete_sections,
    duplicate_elements,
    find_section_at_point,
    linearize,
    move_to_section,
    update_element,
    update_section,
)
from resume_engine.layout.linearizer import coerce_models
from resume_engine.rendering import render
from resume_engine.schemas.layout import Element, Section
from resume_engine.schemas.resume import (
    CanvasRequest,
    DeleteElementsOp,
    DeleteSectionsOp,
    DuplicateElementsOp,
    EditOperation,
    MoveToSectionOp,
    PdfMargins,
    RenderOptions,
    ResumeRecord,
    TemplateRecord,
    TemplateSummary,
    UpdateElementOp,
    UpdateSectionOp,
)
from resume_engine.schemas.scoring import AtsScoreResult
from resume_engine.schemas.user_data import UserData
from resume_engine.scoring import AtsScoringConfig, score
from resume_engine.templating import SummaryGenerator, fill_template

from .pdf_renderer import PdfOptions, PdfRenderer, PlaywrightPdfRenderer
from .summary_llm import generate_summary, summary_llm_enabled

logger = logging.getLogger(__name__)


class RecordNotFound(KeyError):
    def __init__(self, kind: str, record_id: str):
        super().__init__(record_id)
        self.kind = kind
        self.record_id = record_id

    def __str__(self) -> str:
        return f"{self.kind.capitalize()} '{self.record_id}' not found"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id(prefix: str) -> str:
    return f"{prefix}-{secrets.token_urlsafe(9)}"


def _dump(model: TemplateRecord | ResumeRecord) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


class ResumeService:
    def __init__(
        self,
        templates: KeyValueStore,
        resumes: KeyValueStore,
        pdf_renderer: PdfRenderer,
        *,
        scoring_config: AtsScoringConfig | None = None,
        summary_generator: SummaryGenerator | None = None,
        default_page_format: str = "A4",
        id_factory: Callable[[str], str] = _new_id,
    ):
        self.templates = templates
        self.resumes = resumes
        self.pdf_renderer = pdf_renderer
        self.scoring_config = scoring_config or AtsScoringConfig()
        self.summary_generator = summary_generator
        self.default_page_format = default_page_format
        self._new_id = id_factory

    # Templates

    def save_template(
        self,
        name: str,
        elements: Iterable[Any],
        sections: Iterable[Any],
        *,
        canvas_settings: dict[str, Any] | None = None,
        template_id: str | None = None,
    ) -> TemplateRecord:
        element_models = coerce_models(elements, Element, "element")
        section_models = coerce_models(sections, Section, "section")
        linearize(element_models, section_models)
        now = _utc_now_iso()
        created_at = now
        if template_id:
            existing = self.templates.get(template_id)
            if existing is not None:
                created_at = existing.get("createdAt", now)
        record = TemplateRecord(
            id=template_id or self._new_id("template"),
            name=name.strip() or "Untitled template",
            elements=element_models,
            sections=section_models,
            canvas_settings=canvas_settings,
            created_at=created_at,
            updated_at=now,
        )
        self.templates.put(record.id, _dump(record))
        logger.info(
            "template_saved id=%s elements=%s sections=%s",
            record.id,
            len(record.elements),
            len(record.sections),
        )
        return record

    def list_templates(self) -> list[TemplateSummary]:
        summaries = []
        for raw in self.templates.list():
            record = TemplateRecord.model_validate(raw)
            summaries.append(
                TemplateSummary(
                    id=record.id,
                    name=record.name,
                    element_count=len(record.elements),
                    section_count=len(record.sections),
                    created_at=record.created_at,
                    updated_at=record.updated_at,
                )
            )
        return summaries

    def get_template(self, template_id: str) -> TemplateRecord:
        raw = self.templates.get(template_id)
        if raw is None:
            raise RecordNotFound("template", template_id)
        return TemplateRecord.model_validate(raw)

    def delete_template(self, template_id: str) -> None:
        if not self.templates.delete(template_id):
            raise RecordNotFound("template", template_id)
        logger.info("template_deleted id=%s", template_id)

    def apply_operations(self, template_id: str, operations: Sequence[EditOperation]) -> TemplateRecord:
        record = self.get_template(template_id)
        elements, sections = apply_edit_operations(record.elements, record.sections, operations)
        linearize(elements, sections)
        updated = record.model_copy(
            update={
                "elements": elements,
                "sections": sections,
                "updated_at": _utc_now_iso(),
            }
        )
        self.templates.put(updated.id, _dump(updated))
        logger.info("template_edited id=%s operations=%s", template_id, len(operations))
        return updated

    # Resumes

    def generate(
        self,
        template_id: str,
        user_data: UserData,
        job_description: str | None = None,
    ) -> tuple[ResumeRecord, AtsScoreResult]:
        template = self.get_template(template_id)
        filled = fill_template(
            template.elements,
            template.sections,
            user_data,
            job_description,
            summary_generator=self.summary_generator,
            section_aliases=self.scoring_config.section_aliases,
        )
        tree = linearize(filled.elements, filled.sections)
        result = score(tree, user_data, job_description, config=self.scoring_config)
        record = ResumeRecord(
            id=self._new_id("resume"),
            template_id=template.id,
            elements=filled.elements,
            sections=filled.sections,
            canvas_settings=template.canvas_settings,
            user_data=user_data,
            job_description=job_description,
            ats_score=result.score,
            created_at=_utc_now_iso(),
        )
        self.resumes.put(record.id, _dump(record))
        logger.info("resume_generated id=%s template=%s score=%s", record.id, template.id, result.score)
        return record, result

    def get_resume(self, resume_id: str) -> ResumeRecord:
        raw = self.resumes.get(resume_id)
        if raw is None:
            raise RecordNotFound("resume", resume_id)
        return ResumeRecord.model_validate(raw)

    def purge_expired(self) -> dict[str, int]:
        return {
            "templates": self.templates.purge_expired(),
            "resumes": self.resumes.purge_expired(),
        }

    # Output

    def _canvas_tree(self, request: CanvasRequest) -> tuple[DocumentTree, ResumeRecord | None]:
        if request.resume_id is not None and (request.elements is None or request.sections is None):
            record = self.get_resume(request.resume_id)
            return linearize(record.elements, record.sections), record
        return linearize(request.elements, request.sections), None

    def _page_format(self, options: RenderOptions | None) -> str:
        return (options.format if options else None) or self.default_page_format

    def preview_html(self, request: CanvasRequest, options: RenderOptions | None = None) -> str:
        tree, _ = self._canvas_tree(request)
        return render(tree, "html", page_size=self._page_format(options))

    def export_text(self, request: CanvasRequest) -> str:
        tree, _ = self._canvas_tree(request)
        return render(tree, "text")

    def score_canvas(
        self,
        request: CanvasRequest,
        user_data: UserData | None = None,
        job_description: str | None = None,
    ) -> AtsScoreResult:
        tree, record = self._canvas_tree(request)
        if record is not None:
            user_data = user_data or record.user_data
            job_description = job_description or record.job_description
        return score(tree, user_data, job_description, config=self.scoring_config)

    async def print_pdf(self, request: CanvasRequest, options: RenderOptions | None = None) -> bytes:
        tree, _ = self._canvas_tree(request)
        page_format = self._page_format(options)
        html = render(tree, "html", page_size=page_format)
        margins = (options.margins if options else None) or PdfMargins()
        pdf = await self.pdf_renderer.to_pdf(
            html,
            PdfOptions(format=page_format, margins=margins.model_dump()),
        )
        logger.info("pdf_rendered format=%s bytes=%s", page_format, len(pdf))
        return pdf


def apply_edit_operations(
    elements: Sequence[Element],
    sections: Sequence[Section],
    operations: Iterable[EditOperation],
) -> tuple[list[Element], list[Section]]:
    current_elements = list(elements)
    current_sections = list(sections)
    for operation in operations:
        if isinstance(operation, UpdateElementOp):
            current_elements = update_element(current_elements, operation.id, operation.changes)
        elif isinstance(operation, UpdateSectionOp):
            current_sections = update_section(current_sections, operation.id, operation.changes)
        elif isinstance(operation, DeleteElementsOp):
            current_elements = delete_elements(current_elements, operation.ids)
        elif isinstance(operation, DeleteSectionsOp):
            current_elements, current_sections = delete_sections(current_elements, current_sections, operation.ids)
        elif isinstance(operation, MoveToSectionOp):
            target_id = operation.section_id
            if operation.x is not None and operation.y is not None:
                target = find_section_at_point(current_sections, operation.x, operation.y)
                target_id = target.id if target is not None else None
            current_elements = move_to_section(current_elements, operation.element_ids, target_id)
        elif isinstance(operation, DuplicateElementsOp):
            current_elements, _ = duplicate_elements(current_elements, operation.ids)
        else:
            raise TypeError(f"Unsupported edit operation: {operation!r}")
    return current_elements, current_sections


def _build_store(namespace: str, ttl_days: int | None) -> KeyValueStore:
    if settings.storage_backend == "sqlite":
        return SqliteStore(settings.storage_db_path, namespace, ttl_days=ttl_days)
    return InMemoryStore(ttl_days=ttl_days)


def build_resume_service() -> ResumeService:
    return ResumeService(
        templates=_build_store("templates", None),
        resumes=_build_store("resumes", settings.resume_ttl_days),
        pdf_renderer=PlaywrightPdfRenderer(timeout_seconds=settings.pdf_timeout_seconds),
        scoring_config=load_ats_scoring_config(),
        summary_generator=generate_summary if summary_llm_enabled() else None,
        default_page_format=settings.pdf_default_format,
    )


def get_resume_service(request: Request) -> ResumeService:
    state = request.app.state
    service = getattr(state, "resume_service", None)
    if service is None:
        service = build_resume_service()
        state.resume_service = service
    return service
