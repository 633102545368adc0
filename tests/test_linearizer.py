import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_engine.layout import MAX_SECTION_DEPTH, EntryNode, ListNode, ModelError, TextNode, linearize
from resume_engine.rendering import render


def element(element_id, x, y, content="", **extra):
    return {"id": element_id, "x": x, "y": y, "width": 200, "height": 20, "content": content, **extra}


def section(section_id, x, y, title="", **extra):
    return {"id": section_id, "x": x, "y": y, "width": 500, "height": 100, "title": title, **extra}


def nested_chain(count):
    return [
        section(f"s{i}", 0, i * 10, f"Level {i}", parentSection=f"s{i - 1}" if i else None)
        for i in range(count)
    ]


class LinearizerTests(unittest.TestCase):
    def test_empty_input_gives_empty_tree(self):
        tree = linearize([], [])
        self.assertTrue(tree.is_empty)
        self.assertEqual(tree.header, ())
        self.assertEqual(tree.sections, ())
        self.assertEqual(tree.full_text(), "")

    def test_header_follows_reading_order(self):
        tree = linearize(
            [
                element("c", 0, 200, "third"),
                element("a", 50, 100, "upper right"),
                element("b", 10, 105, "lower left"),
            ],
            [],
        )
        self.assertEqual([node.element.id for node in tree.header], ["b", "a", "c"])

    def test_dangling_parent_is_top_level(self):
        tree = linearize([element("e1", 0, 0, "Jane", parentSection="missing")], [])
        self.assertEqual([node.element.id for node in tree.header], ["e1"])

    def test_section_children_sorted_by_position_not_insertion(self):
        tree = linearize(
            [
                element("late", 0, 300, "Second", parentSection="s1"),
                element("early", 0, 150, "First", parentSection="s1"),
            ],
            [section("s1", 0, 100, "Summary")],
        )
        texts = [node.text for node in tree.sections[0].children]
        self.assertEqual(texts, ["First", "Second"])
        self.assertIsInstance(tree.sections[0].children[0], TextNode)

    def test_list_items_section_becomes_bullet_list(self):
        tree = linearize(
            [
                element("b1", 0, 120, "• Python", parentSection="skills"),
                element("b2", 0, 150, "SQL", parentSection="skills"),
            ],
            [section("skills", 0, 100, "Skills", contentType="list-items")],
        )
        (node,) = tree.sections[0].children
        self.assertIsInstance(node, ListNode)
        self.assertEqual(node.items, ("• Python", "SQL"))

    def test_list_sections_render_child_sections_as_entries(self):
        tree = linearize(
            [
                element("ignored", 0, 110, "loose text", parentSection="exp"),
                element("bullet", 0, 230, "• Led a team", parentSection="job1"),
            ],
            [
                section("exp", 0, 100, "Experience", contentType="list-sections"),
                section("job2", 0, 400, "Analyst", parentSection="exp"),
                section("job1", 0, 200, "Engineer", parentSection="exp"),
            ],
        )
        children = tree.sections[0].children
        self.assertEqual([type(child) for child in children], [EntryNode, EntryNode])
        self.assertEqual([child.title for child in children], ["Engineer", "Analyst"])
        self.assertIsInstance(children[0].children[0], ListNode)
        self.assertNotIn("loose text", tree.full_text())

    def test_list_sections_fall_back_to_elements(self):
        tree = linearize(
            [element("only", 0, 110, "Freelance work", parentSection="exp")],
            [section("exp", 0, 100, "Experience", contentType="list-sections")],
        )
        (node,) = tree.sections[0].children
        self.assertIsInstance(node, TextNode)
        self.assertEqual(node.text, "Freelance work")

    def test_filled_content_overrides_elements(self):
        tree = linearize(
            [element("raw", 0, 110, "raw element", parentSection="exp")],
            [
                section(
                    "exp",
                    0,
                    100,
                    "Experience",
                    filledContent=[
                        {"type": "entry", "title": "Engineer", "subtitle": "2020 - 2023", "bullets": ["Led a team"]},
                        {"type": "list", "items": ["Python", "SQL"]},
                        {"type": "text", "content": "Open source maintainer"},
                    ],
                )
            ],
        )
        entry, skills, text = tree.sections[0].children
        self.assertEqual((entry.title, entry.subtitle), ("Engineer", "2020 - 2023"))
        self.assertEqual(entry.children[0].items, ("Led a team",))
        self.assertEqual((skills.items, skills.style), (("Python", "SQL"), "tags"))
        self.assertEqual(text.text, "Open source maintainer")
        self.assertNotIn("raw element", tree.full_text())

    def test_two_section_cycle_is_model_error(self):
        with self.assertRaises(ModelError) as ctx:
            linearize([], [section("A", 0, 0, parentSection="B"), section("B", 0, 200, parentSection="A")])
        self.assertEqual(set(ctx.exception.ids), {"A", "B"})

    def test_longer_cycle_and_self_parent_are_model_errors(self):
        with self.assertRaises(ModelError):
            linearize(
                [],
                [
                    section("A", 0, 0, parentSection="C"),
                    section("B", 0, 100, parentSection="A"),
                    section("C", 0, 200, parentSection="B"),
                ],
            )
        with self.assertRaises(ModelError) as ctx:
            linearize([], [section("S", 0, 0, parentSection="S")])
        self.assertEqual(ctx.exception.ids, ("S",))

    def test_deep_acyclic_nesting_is_model_error(self):
        with self.assertRaises(ModelError) as ctx:
            linearize([], nested_chain(700))
        self.assertEqual(ctx.exception.ids, (f"s{MAX_SECTION_DEPTH}",))

    def test_nesting_at_depth_limit_linearizes_and_renders(self):
        sections = nested_chain(MAX_SECTION_DEPTH)
        deepest = sections[-1]["id"]
        tree = linearize([element("leaf", 0, 5000, "Deepest line", parentSection=deepest)], sections)
        self.assertIn("Deepest line", tree.full_text())
        self.assertIn("Deepest line", render(tree, "text"))
        self.assertIn("Deepest line", render(tree, "html"))
        with self.assertRaises(ModelError):
            linearize([], nested_chain(MAX_SECTION_DEPTH + 1))

    def test_duplicate_ids_rejected_within_a_collection_only(self):
        with self.assertRaises(ModelError):
            linearize([element("dup", 0, 0), element("dup", 0, 50)], [])
        tree = linearize([element("shared", 0, 0, "x")], [section("shared", 0, 100, "Skills")])
        self.assertEqual(len(tree.sections), 1)

    def test_missing_geometry_is_model_error(self):
        with self.assertRaises(ModelError) as ctx:
            linearize([{"id": "e1", "y": 0, "width": 10, "height": 10}], [])
        self.assertIn("index 0", ctx.exception.message)

    def test_full_text_follows_tree_order(self):
        tree = linearize(
            [
                element("name", 0, 0, "Jane Doe"),
                element("e1", 0, 120, "Built things", parentSection="s1"),
            ],
            [section("s1", 0, 100, "Experience")],
        )
        self.assertEqual(tree.full_text(), "Jane Doe Experience Built things")


if __name__ == "__main__":
    unittest.main()
