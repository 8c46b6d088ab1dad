"""Tests for system/text prompt rendering and message content assembly."""

from __future__ import annotations

import unittest

from storyboard.prompts import (
    GROUP_INSTRUCTIONS,
    GROUP_MARKERS,
    build_message_content,
    build_system_prompt,
    build_text_prompt,
    get_frame_count,
    group_reference_images,
    parse_data_url,
)

PNG_URL = "data:image/png;base64,iVBORw0KGgo="
JPEG_URL = "data:image/jpeg;base64,/9j/4AAQ"


def _ref(name: str, purpose: str, url: str = PNG_URL) -> dict:
    return {"name": name, "base64": url, "purpose": purpose}


class FrameCountTest(unittest.TestCase):
    def test_policy(self) -> None:
        self.assertEqual(get_frame_count("15"), "3 to 4")
        self.assertEqual(get_frame_count("30"), "5 to 6")
        self.assertEqual(get_frame_count("60"), "7 to 8")
        self.assertEqual(get_frame_count(60), "7 to 8")

    def test_unknown_uses_default(self) -> None:
        self.assertEqual(get_frame_count("90"), "5 to 6")

    def test_system_prompt_carries_frame_count(self) -> None:
        self.assertIn("Generate exactly 3 to 4 frames for a 15-second", build_system_prompt("15"))
        self.assertIn("Generate exactly 7 to 8 frames for a 60-second", build_system_prompt("60"))

    def test_system_prompt_describes_schema(self) -> None:
        prompt = build_system_prompt("30")
        for field in ("sceneNumber", "timestamp", "sceneDescription", "dialogue",
                      "cameraWork", "sound", "directionNotes", "imagePrompt"):
            self.assertIn(f'"{field}"', prompt)
        self.assertIn("narrative backbone", prompt)


class TextPromptTest(unittest.TestCase):
    def test_minimal_brief(self) -> None:
        prompt = build_text_prompt({"productName": "Acme Cola"})
        self.assertEqual(
            prompt,
            "Create a storyboard for a 30-second commercial advertisement.\n"
            "Product/Service: Acme Cola",
        )

    def test_fields_in_fixed_order(self) -> None:
        brief = {
            "productName": "Acme Cola",
            "additionalNotes": "No dogs",
            "setting": "Desert diner",
            "keyMessage": "Cold relief",
            "targetAudience": "Teens",
            "creativeTone": "Retro",
            "talent": "A tired trucker",
            "storyline": "Trucker finds the last cola on earth.",
        }
        prompt = build_text_prompt(brief)
        markers = [
            "Talent/Cast: A tired trucker",
            "Creative Tone: Retro",
            "Target Audience: Teens",
            "Key Message: Cold relief",
            "Setting/Location: Desert diner",
            "Trucker finds the last cola on earth.",
            "Additional Notes: No dogs",
        ]
        positions = [prompt.index(marker) for marker in markers]
        self.assertEqual(positions, sorted(positions))

    def test_absent_and_blank_fields_are_omitted(self) -> None:
        prompt = build_text_prompt({"productName": "Acme", "talent": "  ", "setting": None})
        self.assertNotIn("Talent/Cast", prompt)
        self.assertNotIn("Setting/Location", prompt)
        self.assertNotIn("Storyline", prompt)

    def test_storyline_is_narrative_backbone(self) -> None:
        prompt = build_text_prompt({"productName": "Acme", "storyline": "A heist."})
        self.assertIn("Storyline / Prompt", prompt)
        self.assertIn("narrative backbone", prompt)
        self.assertTrue(prompt.endswith("A heist."))

    def test_duration_in_opening_line(self) -> None:
        prompt = build_text_prompt({"productName": "Acme", "duration": "15"})
        self.assertTrue(prompt.startswith("Create a storyboard for a 15-second"))

    def test_reference_instructions_per_group(self) -> None:
        brief = {
            "productName": "Acme",
            "referenceImages": [_ref("tone", "visual-tone"), _ref("can", "product")],
        }
        prompt = build_text_prompt(brief)
        self.assertIn(GROUP_INSTRUCTIONS["product"], prompt)
        self.assertIn(GROUP_INSTRUCTIONS["visual-tone"], prompt)
        self.assertNotIn(GROUP_INSTRUCTIONS["talent"], prompt)
        self.assertLess(
            prompt.index(GROUP_INSTRUCTIONS["product"]),
            prompt.index(GROUP_INSTRUCTIONS["visual-tone"]),
        )


class MessageContentTest(unittest.TestCase):
    def test_text_only_without_images(self) -> None:
        brief = {"productName": "Acme", "referenceImages": []}
        self.assertEqual(build_message_content(brief), build_text_prompt(brief))

    def test_grouped_blocks_then_text(self) -> None:
        brief = {
            "productName": "Acme",
            "referenceImages": [
                _ref("mood", "visual-tone", JPEG_URL),
                _ref("face", "talent"),
                _ref("can", "product"),
                _ref("can-back", "product"),
            ],
        }
        content = build_message_content(brief)
        kinds = [block["type"] if block["type"] == "image" else block["text"] for block in content[:-1]]
        self.assertEqual(kinds, [
            GROUP_MARKERS["product"], "image", "image",
            GROUP_MARKERS["talent"], "image",
            GROUP_MARKERS["visual-tone"], "image",
        ])
        self.assertEqual(content[-1], {"type": "text", "text": build_text_prompt(brief)})
        self.assertEqual(content[-2]["source"], {
            "type": "base64", "media_type": "image/jpeg", "data": "/9j/4AAQ",
        })

    def test_invalid_data_url(self) -> None:
        brief = {"productName": "Acme", "referenceImages": [_ref("bad", "product", "not-a-url")]}
        with self.assertRaises(ValueError):
            build_message_content(brief)


class HelpersTest(unittest.TestCase):
    def test_parse_data_url(self) -> None:
        self.assertEqual(parse_data_url(PNG_URL), ("image/png", "iVBORw0KGgo="))
        with self.assertRaises(ValueError):
            parse_data_url("data:text/plain;base64,aGk=")
        for value in (None, 123, b"data:image/png;base64,AA==", {"url": "x"}):
            with self.subTest(value=value), self.assertRaises(ValueError):
                parse_data_url(value)

    def test_group_ignores_unknown_purpose(self) -> None:
        groups = group_reference_images({"referenceImages": [_ref("x", "logo"), _ref("y", "talent")]})
        self.assertEqual([ref["name"] for ref in groups["talent"]], ["y"])
        self.assertEqual(groups["product"], [])
        self.assertEqual(groups["visual-tone"], [])
