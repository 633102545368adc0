from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import Field, model_validator

from .layout import CamelModel, Element, Section
from .scoring import ScoreBreakdown, Suggestion
from .user_data import UserData

PageFormat = Literal["A4", "Letter"]

# Canvas arrays stay raw on the way in so shape problems surface as ModelError
# (400) from the linearizer rather than request validation errors.
RawItems = list[dict[str, Any]]


class TemplatePayload(CamelModel):
    elements: RawItems = Field(default_factory=list)
    sections: RawItems = Field(default_factory=list)
    canvas_settings: dict[str, Any] | None = None


class TemplateSaveRequest(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    template: TemplatePayload
    template_id: str | None = Field(default=None, max_length=200)


class TemplateSaveResponse(CamelModel):
    success: bool = True
    template_id: str


class TemplateRecord(CamelModel):
    id: str
    name: str
    elements: list[Element] = Field(default_factory=list)
    sections: list[Section] = Field(default_factory=list)
    canvas_settings: dict[str, Any] | None = None
    created_at: str
    updated_at: str


class TemplateSummary(CamelModel):
    id: str
    name: str
    element_count: int
    section_count: int
    created_at: str
    updated_at: str


class TemplateListResponse(CamelModel):
    templates: list[TemplateSummary] = Field(default_factory=list)


class TemplateResponse(CamelModel):
    success: bool = True
    template: TemplateRecord


class SuccessResponse(CamelModel):
    success: bool = True


class UpdateElementOp(CamelModel):
    op: Literal["update_element"]
    id: str
    changes: dict[str, Any] = Field(default_factory=dict)


class UpdateSectionOp(CamelModel):
    op: Literal["update_section"]
    id: str
    changes: dict[str, Any] = Field(default_factory=dict)


class DeleteElementsOp(CamelModel):
    op: Literal["delete_elements"]
    ids: list[str] = Field(min_length=1)


class DeleteSectionsOp(CamelModel):
    op: Literal["delete_sections"]
    ids: list[str] = Field(min_length=1)


class MoveToSectionOp(CamelModel):
    """Reparent elements to ``section_id``, or to the section under a drop point."""

    op: Literal["move_to_section"]
    element_ids: list[str] = Field(min_length=1)
    section_id: str | None = None
    x: float | None = None
    y: float | None = None

    @model_validator(mode="after")
    def _one_target(self):
        if (self.x is None) != (self.y is None):
            raise ValueError("A drop point needs both x and y.")
        if self.section_id is not None and self.x is not None:
            raise ValueError("Use either sectionId or a drop point, not both.")
        return self


class DuplicateElementsOp(CamelModel):
    op: Literal["duplicate_elements"]
    ids: list[str] = Field(min_length=1)


EditOperation = Annotated[
    Union[UpdateElementOp, UpdateSectionOp, DeleteElementsOp, DeleteSectionsOp, MoveToSectionOp, DuplicateElementsOp],
    Field(discriminator="op"),
]


class TemplateOperationsRequest(CamelModel):
    operations: list[EditOperation] = Field(min_length=1, max_length=500)


class PdfMargins(CamelModel):
    top: str = "0mm"
    right: str = "0mm"
    bottom: str = "0mm"
    left: str = "0mm"


class RenderOptions(CamelModel):
    format: PageFormat | None = None
    margins: PdfMargins | None = None


class CanvasRequest(CamelModel):
    resume_id: str | None = Field(default=None, max_length=200)
    elements: RawItems | None = None
    sections: RawItems | None = None

    @model_validator(mode="after")
    def _needs_source(self):
        if self.resume_id is None and (self.elements is None or self.sections is None):
            raise ValueError("Provide either resumeId or both elements and sections.")
        return self


class PreviewRequest(CanvasRequest):
    options: RenderOptions = Field(default_factory=RenderOptions)


class ScoreRequest(CanvasRequest):
    user_data: UserData | None = None
    job_description: str | None = Field(default=None, max_length=50000)


class PrintRequest(CanvasRequest):
    file_name: str = Field(default="resume", max_length=200)
    options: RenderOptions = Field(default_factory=RenderOptions)


class GenerateRequest(CamelModel):
    template_id: str = Field(min_length=1, max_length=200)
    user_data: UserData = Field(default_factory=UserData)
    job_description: str | None = Field(default=None, max_length=50000)


class ResumeRecord(CamelModel):
    id: str
    template_id: str
    elements: list[Element] = Field(default_factory=list)
    sections: list[Section] = Field(default_factory=list)
    canvas_settings: dict[str, Any] | None = None
    user_data: UserData = Field(default_factory=UserData)
    job_description: str | None = None
    ats_score: int = Field(ge=0, le=100)
    created_at: str


class GenerateResponse(CamelModel):
    success: bool = True
    resume_id: str
    filled_resume: ResumeRecord
    ats_score: int = Field(ge=0, le=100)
    suggestions: list[Suggestion] = Field(default_factory=list)
    breakdown: ScoreBreakdown


class ResumeResponse(CamelModel):
    success: bool = True
    resume: ResumeRecord
