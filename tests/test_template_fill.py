import copy
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_engine.schemas.layout import Element, Section
from resume_engine.schemas.user_data import UserData
from resume_engine.templating import fallback_summary, fill_template
from resume_engine.templating.summary import DEFAULT_SUMMARY

USER = {
    "personalInfo": {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "(555) 123-4567",
        "linkedin": "linkedin.com/in/jane",
    },
    "experience": [
        {"company": "Tech Corp", "title": "Senior Developer", "startDate": "Jan 2020", "current": True},
        {"company": "Startup Inc", "title": "Developer"},
    ],
    "education": [{"school": "State University", "degree": "Bachelor of Science", "field": "Computer Science"}],
    "skills": ["Python", "SQL", "Docker"],
}


def element(element_id, content, **extra):
    return {"id": element_id, "x": 0, "y": 0, "width": 300, "height": 20, "content": content, **extra}


def section(section_id, title, **extra):
    return {"id": section_id, "x": 0, "y": 100, "width": 500, "height": 100, "title": title, **extra}


class TemplateFillTests(unittest.TestCase):
    def test_personal_placeholders(self):
        filled = fill_template(
            [element("e1", "{name} | {EMAIL} | { phone } | {linkedin}"), element("e2", "Site: {website}")],
            [],
            USER,
        )
        self.assertEqual(
            filled.elements[0].content,
            "Jane Doe | jane@example.com | (555) 123-4567 | linkedin.com/in/jane",
        )
        self.assertEqual(filled.elements[1].content, "Site: ")

    def test_unknown_placeholders_are_left_verbatim(self):
        filled = fill_template([element("e1", "{favoriteColor} and {name}")], [], USER)
        self.assertEqual(filled.elements[0].content, "{favoriteColor} and Jane Doe")

    def test_summary_prefers_user_text(self):
        user = dict(USER, summary="Hands-on engineer.")
        filled = fill_template([element("s", "{summary}")], [], user, summary_generator=lambda *_: "unused")
        self.assertEqual(filled.elements[0].content, "Hands-on engineer.")

    def test_summary_generator_called_once(self):
        calls = []

        def generator(user_data, job_description):
            calls.append(job_description)
            return "Generated summary."

        filled = fill_template(
            [element("a", "{summary}"), element("b", "Again: {Summary}")],
            [],
            USER,
            "Python role",
            summary_generator=generator,
        )
        self.assertEqual(filled.elements[0].content, "Generated summary.")
        self.assertEqual(filled.elements[1].content, "Again: Generated summary.")
        self.assertEqual(calls, ["Python role"])

    def test_summary_falls_back_to_fixed_template(self):
        filled = fill_template([element("s", "{summary}")], [], USER, summary_generator=lambda *_: None)
        self.assertEqual(
            filled.elements[0].content,
            "Senior Developer with experience at Tech Corp and Startup Inc. "
            "Skilled in Python, SQL and Docker. Holds a Bachelor of Science.",
        )

    def test_fallback_summary_without_data(self):
        self.assertEqual(fallback_summary(UserData()), DEFAULT_SUMMARY)

    def test_sections_are_annotated(self):
        filled = fill_template(
            [],
            [
                section("exp", "Work Experience"),
                section("edu", "Education"),
                section("skills", "Technical Skills"),
                section("misc", "Hobbies"),
            ],
            USER,
        )
        annotated = {s.id: (s.filled, s.item_count) for s in filled.sections}
        self.assertEqual(annotated["exp"], (True, 2))
        self.assertEqual(annotated["edu"], (True, 1))
        self.assertEqual(annotated["skills"], (True, 3))
        self.assertEqual(annotated["misc"], (False, None))

    def test_configured_aliases_drive_section_flags(self):
        sections = [section("exp", "Career History"), section("edu", "Education")]
        default = {s.id: s.filled for s in fill_template([], sections, USER).sections}
        self.assertEqual(default, {"exp": False, "edu": True})

        filled = fill_template([], sections, USER, section_aliases={"experience": ("Career History",)})
        annotated = {s.id: (s.filled, s.item_count) for s in filled.sections}
        self.assertEqual(annotated["exp"], (True, 2))
        self.assertEqual(annotated["edu"], (True, 1))

    def test_inputs_are_not_mutated(self):
        elements = [element("e1", "{name}")]
        sections = [section("exp", "Experience")]
        snapshot = copy.deepcopy((elements, sections))
        first = fill_template(elements, sections, USER)
        second = fill_template(elements, sections, USER)
        self.assertEqual((elements, sections), snapshot)
        self.assertEqual(first, second)
        self.assertIsNot(first.elements[0], second.elements[0])
        self.assertIsNot(first.sections[0], second.sections[0])

    def test_model_inputs_are_copied(self):
        original = Element(id="e1", x=0, y=0, width=10, height=10, content="{name}")
        template_section = Section(id="exp", x=0, y=0, width=10, height=10, title="Experience")
        filled = fill_template([original], [template_section], USER)
        self.assertEqual(original.content, "{name}")
        self.assertFalse(template_section.filled)
        self.assertIsNot(filled.elements[0], original)
        self.assertTrue(filled.sections[0].filled)


if __name__ == "__main__":
    unittest.main()
