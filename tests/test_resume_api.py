import os
import sys
import unittest
from dataclasses import replace
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep API tests deterministic: no rate limits, no keys, no LLM.
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SUMMARY_LLM_ENABLED", "false")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ["API_KEY"] = ""

from fastapi.testclient import TestClient

from resume_engine.core import security
from resume_engine.core.resume_store import InMemoryStore
from resume_engine.main import app
from resume_engine.schemas.user_data import UserData
from resume_engine.scoring import AtsScoringConfig
from resume_engine.scoring.config import SECTION_ALIASES
from resume_engine.services.pdf_renderer import RenderFailure
from resume_engine.services.resume_service import ResumeService

TEMPLATE = {
    "elements": [
        {"id": "e-name", "x": 40, "y": 20, "width": 300, "height": 30, "content": "{name}", "atsField": "name", "fontSize": 22},
        {"id": "e-contact", "x": 40, "y": 60, "width": 400, "height": 20, "content": "{email} | {phone} | {linkedin}", "atsField": "contact"},
        {"id": "e-summary", "x": 40, "y": 120, "width": 500, "height": 40, "content": "{summary}", "parentSection": "s-summary"},
        {"id": "e-exp", "x": 40, "y": 220, "width": 500, "height": 20, "content": "Led development team, increased throughput by 30%", "parentSection": "s-exp"},
        {"id": "e-edu", "x": 40, "y": 320, "width": 500, "height": 20, "content": "B.S. Computer Science, State University", "parentSection": "s-edu"},
        {"id": "e-skill", "x": 40, "y": 420, "width": 500, "height": 20, "content": "• Python", "parentSection": "s-skills"},
    ],
    "sections": [
        {"id": "s-summary", "x": 30, "y": 100, "width": 540, "height": 80, "title": "Professional Summary"},
        {"id": "s-exp", "x": 30, "y": 200, "width": 540, "height": 80, "title": "Experience"},
        {"id": "s-edu", "x": 30, "y": 300, "width": 540, "height": 80, "title": "Education"},
        {"id": "s-skills", "x": 30, "y": 400, "width": 540, "height": 80, "title": "Skills", "contentType": "list-items"},
    ],
    "canvasSettings": {"width": 794, "height": 1123},
}

USER_DATA = {
    "personalInfo": {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "(555) 123-4567",
        "location": "Berlin",
        "linkedin": "linkedin.com/in/jane",
    },
    "summary": "Backend engineer focused on reliable APIs.",
    "experience": [{"company": "Tech Corp", "title": "Senior Developer"}],
    "skills": ["Python", "SQL"],
}


class FakePdfRenderer:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    async def to_pdf(self, html, options):
        self.calls.append((html, options))
        if self.fail:
            raise RenderFailure("browser crashed")
        return b"%PDF-1.4 fake"


class ResumeApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        self.renderer = FakePdfRenderer()
        app.state.resume_service = ResumeService(
            templates=InMemoryStore(),
            resumes=InMemoryStore(ttl_days=7),
            pdf_renderer=self.renderer,
        )

    def _save_template(self, template=None, name="Classic"):
        response = self.client.post("/v1/templates/save", json={"name": name, "template": template or TEMPLATE})
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["templateId"]

    def _generate(self, template_id):
        response = self.client.post(
            "/v1/resume/generate",
            json={"templateId": template_id, "userData": USER_DATA, "jobDescription": "Python backend engineer"},
        )
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()

    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "healthy"})

    def test_template_crud(self):
        template_id = self._save_template()

        listing = self.client.get("/v1/templates").json()["templates"]
        self.assertEqual(len(listing), 1)
        self.assertEqual(listing[0]["id"], template_id)
        self.assertEqual(listing[0]["elementCount"], 6)
        self.assertEqual(listing[0]["sectionCount"], 4)

        fetched = self.client.get(f"/v1/templates/{template_id}")
        self.assertEqual(fetched.status_code, 200)
        body = fetched.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["template"]["name"], "Classic")
        self.assertEqual(body["template"]["elements"][0]["id"], "e-name")
        self.assertEqual(body["template"]["canvasSettings"], {"width": 794, "height": 1123})

        self.assertEqual(self.client.delete(f"/v1/templates/{template_id}").json(), {"success": True})
        self.assertEqual(self.client.get(f"/v1/templates/{template_id}").status_code, 404)
        self.assertEqual(self.client.delete(f"/v1/templates/{template_id}").status_code, 404)

    def test_save_rejects_parent_cycle(self):
        template = {
            "elements": [],
            "sections": [
                {"id": "A", "x": 0, "y": 0, "width": 10, "height": 10, "parentSection": "B"},
                {"id": "B", "x": 0, "y": 50, "width": 10, "height": 10, "parentSection": "A"},
            ],
        }
        response = self.client.post("/v1/templates/save", json={"name": "Loop", "template": template})
        self.assertEqual(response.status_code, 400)
        self.assertIn("cycle", response.json()["detail"]["error"])
        self.assertEqual(sorted(response.json()["detail"]["ids"]), ["A", "B"])

    def test_save_rejects_runaway_nesting(self):
        sections = [
            {"id": f"s{i}", "x": 0, "y": i * 10, "width": 10, "height": 10, "parentSection": f"s{i - 1}" if i else None}
            for i in range(500)
        ]
        response = self.client.post("/v1/templates/save", json={"name": "Deep", "template": {"sections": sections}})
        self.assertEqual(response.status_code, 400)
        self.assertIn("nested", response.json()["detail"]["error"])

        preview = self.client.post("/v1/resume/text", json={"elements": [], "sections": sections})
        self.assertEqual(preview.status_code, 400)

    def test_save_rejects_invalid_element(self):
        template = {"elements": [{"id": "e1", "y": 0, "width": 10, "height": 10}], "sections": []}
        response = self.client.post("/v1/templates/save", json={"name": "Broken", "template": template})
        self.assertEqual(response.status_code, 400)

    def test_template_operations(self):
        template_id = self._save_template()
        response = self.client.post(
            f"/v1/templates/{template_id}/operations",
            json={
                "operations": [
                    {"op": "update_element", "id": "e-name", "changes": {"content": "{name}!", "fontWeight": 700}},
                    {"op": "delete_sections", "ids": ["s-summary"]},
                    {"op": "duplicate_elements", "ids": ["e-exp"]},
                ]
            },
        )
        self.assertEqual(response.status_code, 200, response.text)
        template = response.json()["template"]
        ids = [element["id"] for element in template["elements"]]
        self.assertNotIn("e-summary", ids)
        self.assertEqual(len(ids), 6)
        self.assertEqual(template["elements"][0]["content"], "{name}!")
        self.assertEqual(template["elements"][0]["fontWeight"], "700")
        self.assertEqual([s["id"] for s in template["sections"]], ["s-exp", "s-edu", "s-skills"])

    def test_move_to_section_by_drop_point(self):
        template_id = self._save_template()
        response = self.client.post(
            f"/v1/templates/{template_id}/operations",
            json={"operations": [{"op": "move_to_section", "elementIds": ["e-skill"], "x": 100, "y": 330}]},
        )
        self.assertEqual(response.status_code, 200, response.text)
        parents = {e["id"]: e.get("parentSection") for e in response.json()["template"]["elements"]}
        self.assertEqual(parents["e-skill"], "s-edu")

        outside = self.client.post(
            f"/v1/templates/{template_id}/operations",
            json={"operations": [{"op": "move_to_section", "elementIds": ["e-skill"], "x": 900, "y": 900}]},
        )
        parents = {e["id"]: e.get("parentSection") for e in outside.json()["template"]["elements"]}
        self.assertIsNone(parents["e-skill"])

    def test_move_to_section_target_validation(self):
        template_id = self._save_template()
        for operation in (
            {"op": "move_to_section", "elementIds": ["e-skill"], "x": 100},
            {"op": "move_to_section", "elementIds": ["e-skill"], "sectionId": "s-edu", "x": 1, "y": 1},
        ):
            response = self.client.post(f"/v1/templates/{template_id}/operations", json={"operations": [operation]})
            self.assertEqual(response.status_code, 422)

    def test_operations_errors(self):
        template_id = self._save_template()
        bad = self.client.post(
            f"/v1/templates/{template_id}/operations",
            json={"operations": [{"op": "update_element", "id": "nope", "changes": {}}]},
        )
        self.assertEqual(bad.status_code, 400)
        missing = self.client.post(
            "/v1/templates/unknown/operations",
            json={"operations": [{"op": "delete_elements", "ids": ["e-name"]}]},
        )
        self.assertEqual(missing.status_code, 404)

    def test_generate_and_fetch_resume(self):
        template_id = self._save_template()
        body = self._generate(template_id)
        self.assertTrue(body["success"])
        self.assertIsInstance(body["atsScore"], int)
        self.assertGreaterEqual(body["atsScore"], 0)
        self.assertLessEqual(body["atsScore"], 100)
        self.assertIn("sections", body["breakdown"])
        contents = {e["id"]: e["content"] for e in body["filledResume"]["elements"]}
        self.assertEqual(contents["e-name"], "Jane Doe")
        self.assertEqual(contents["e-contact"], "jane@example.com | (555) 123-4567 | linkedin.com/in/jane")
        self.assertEqual(contents["e-summary"], "Backend engineer focused on reliable APIs.")
        sections = {s["id"]: s for s in body["filledResume"]["sections"]}
        self.assertTrue(sections["s-exp"]["filled"])
        self.assertEqual(sections["s-skills"]["itemCount"], 2)

        fetched = self.client.get(f"/v1/resume/{body['resumeId']}")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["resume"]["atsScore"], body["atsScore"])

        template = self.client.get(f"/v1/templates/{template_id}").json()["template"]
        self.assertEqual(template["elements"][0]["content"], "{name}")

    def test_generate_unknown_template(self):
        response = self.client.post("/v1/resume/generate", json={"templateId": "missing", "userData": USER_DATA})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.client.get("/v1/resume/missing").status_code, 404)

    def test_preview_and_text_export(self):
        template_id = self._save_template()
        resume_id = self._generate(template_id)["resumeId"]

        preview = self.client.post("/v1/resume/preview", json={"resumeId": resume_id, "options": {"format": "Letter"}})
        self.assertEqual(preview.status_code, 200)
        self.assertTrue(preview.headers["content-type"].startswith("text/html"))
        self.assertIn('<h1 class="name" style="font-size: 22pt">Jane Doe</h1>', preview.text)
        self.assertIn("width: 816px", preview.text)

        text = self.client.post("/v1/resume/text", json={"resumeId": resume_id})
        self.assertEqual(text.status_code, 200)
        self.assertTrue(text.headers["content-type"].startswith("text/plain"))
        self.assertTrue(text.text.startswith("Jane Doe\n"))
        self.assertIn("SKILLS\n", text.text)
        self.assertIn("• Python", text.text)

        direct = self.client.post("/v1/resume/text", json={"elements": TEMPLATE["elements"], "sections": TEMPLATE["sections"]})
        self.assertTrue(direct.text.startswith("{name}\n"))

    def test_score_endpoint(self):
        response = self.client.post(
            "/v1/resume/score",
            json={"elements": [], "sections": [], "jobDescription": "Kubernetes engineer"},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["score"], 0)
        self.assertEqual(body["suggestions"][0]["priority"], "high")
        self.assertEqual(body["breakdown"]["fonts"]["score"], 100)
        self.assertEqual(body["breakdown"]["keywords"]["jobKeywords"], ["kubernetes", "engineer"])

    def test_canvas_source_is_required(self):
        response = self.client.post("/v1/resume/preview", json={"elements": []})
        self.assertEqual(response.status_code, 422)

    def test_print_returns_pdf(self):
        template_id = self._save_template()
        resume_id = self._generate(template_id)["resumeId"]
        response = self.client.post(
            "/v1/resume/print",
            json={"resumeId": resume_id, "fileName": "jane-doe", "options": {"format": "Letter", "margins": {"top": "10mm"}}},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-type"], "application/pdf")
        self.assertEqual(response.headers["content-disposition"], 'attachment; filename="jane-doe.pdf"')
        self.assertEqual(response.content, b"%PDF-1.4 fake")
        html, options = self.renderer.calls[0]
        self.assertIn("Jane Doe", html)
        self.assertEqual(options.format, "Letter")
        self.assertEqual(options.margins["top"], "10mm")
        self.assertEqual(options.margins["left"], "0mm")

    def test_print_sanitizes_filename(self):
        response = self.client.post(
            "/v1/resume/print",
            json={"elements": [], "sections": [], "fileName": '../evil"name.pdf'},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-disposition"], 'attachment; filename="evilname.pdf"')

    def test_print_failure_maps_to_503(self):
        self.renderer.fail = True
        response = self.client.post("/v1/resume/print", json={"elements": [], "sections": []})
        self.assertEqual(response.status_code, 503)

    def test_generate_uses_configured_section_aliases(self):
        aliases = {**SECTION_ALIASES, "experience": ("Career History",)}
        service = ResumeService(
            templates=InMemoryStore(),
            resumes=InMemoryStore(),
            pdf_renderer=self.renderer,
            scoring_config=AtsScoringConfig(section_aliases=aliases),
        )
        template = service.save_template(
            "Aliased",
            [],
            [{"id": "s-career", "x": 0, "y": 0, "width": 500, "height": 100, "title": "Career History"}],
        )
        record, result = service.generate(template.id, UserData.model_validate(USER_DATA))
        self.assertTrue(record.sections[0].filled)
        self.assertEqual(record.sections[0].item_count, 1)
        self.assertIn("experience", result.breakdown.sections.present)

    def test_lifespan_shutdown_closes_store_connections(self):
        with patch("resume_engine.core.lifespan.close_connections") as close:
            with TestClient(app) as client:
                self.assertEqual(client.get("/v1/health").status_code, 200)
                close.assert_not_called()
        close.assert_called_once_with()

    def test_api_key_required_when_configured(self):
        with patch.object(security, "settings", replace(security.settings, api_key="secret")):
            denied = self.client.post("/v1/templates/save", json={"name": "x", "template": TEMPLATE})
            self.assertEqual(denied.status_code, 401)
            allowed = self.client.post(
                "/v1/templates/save",
                json={"name": "x", "template": TEMPLATE},
                headers={"X-API-Key": "secret"},
            )
            self.assertEqual(allowed.status_code, 200)


if __name__ == "__main__":
    unittest.main()
