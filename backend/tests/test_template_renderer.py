"""
Placeholder resolution, font/color/policy cascades and draw-plan rendering.

Run: pytest backend/tests/test_template_renderer.py -v
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from pdf_templates.schemas.template import (
    FontWeight,
    MissingFieldBehavior,
    Template,
    TemplateColor,
    TemplateDefaults,
    TemplateField,
    TemplateFont,
)
from pdf_templates.services.template_renderer import (
    FALLBACK_COLOR,
    FALLBACK_FONT,
    render_template,
    resolve_color,
    resolve_content,
    resolve_font,
    resolve_missing_field_behavior,
)


FIELDS = [TemplateField(name="x", default_value="D", pages=[1])]


# ═══════════════════════════════════════════════════════════════════════════════
# Content resolution
# ═══════════════════════════════════════════════════════════════════════════════


class TestResolveContent:

    @pytest.mark.parametrize(
        "behavior,fields,expected",
        [
            ("leave_placeholder", [], "{{x}}"),
            ("empty_string", [], ""),
            ("use_default", FIELDS, "D"),
            ("use_default", [], ""),
            (MissingFieldBehavior.USE_DEFAULT, FIELDS, "D"),
        ],
    )
    def test_missing_field_policies(self, behavior, fields, expected):
        assert resolve_content("{{x}}", {}, behavior, fields) == expected

    def test_data_wins_over_policy(self):
        assert resolve_content("{{x}}", {"x": "V"}, "use_default", FIELDS) == "V"

    def test_empty_data_value_still_substituted(self):
        assert resolve_content("[{{x}}]", {"x": ""}, "leave_placeholder", FIELDS) == "[]"

    def test_each_token_resolved_independently(self):
        content = "Dear {{first}} {{last}}, ref {{x}}"
        result = resolve_content(content, {"first": "Ada"}, "use_default", FIELDS)
        assert result == "Dear Ada , ref D"

    def test_repeated_tokens(self):
        assert resolve_content("{{a}}-{{a}}", {"a": "1"}, "empty_string", []) == "1-1"

    def test_non_string_values_stringified(self):
        assert resolve_content("Total: {{total}}", {"total": 100.5}, "empty_string", []) == "Total: 100.5"

    def test_text_without_tokens_untouched(self):
        assert resolve_content("no tokens {here}", {}, "empty_string", []) == "no tokens {here}"

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError, match="Unknown missing field behavior"):
            resolve_content("{{x}}", {}, "drop", [])


# ═══════════════════════════════════════════════════════════════════════════════
# Cascades: element → template defaults → built-in fallback
# ═══════════════════════════════════════════════════════════════════════════════


class TestCascades:

    ELEMENT_FONT = TemplateFont(name="Courier", size=9)
    DEFAULT_FONT = TemplateFont(name="Times-Roman", size=14, weight=FontWeight.BOLD)

    def test_font_element_first(self):
        defaults = TemplateDefaults(font=self.DEFAULT_FONT)
        assert resolve_font(self.ELEMENT_FONT, defaults) == self.ELEMENT_FONT

    def test_font_defaults_second(self):
        defaults = TemplateDefaults(font=self.DEFAULT_FONT)
        assert resolve_font(None, defaults) == self.DEFAULT_FONT

    @pytest.mark.parametrize("defaults", [None, TemplateDefaults()])
    def test_font_fallback(self, defaults):
        font = resolve_font(None, defaults)
        assert font == FALLBACK_FONT
        assert (font.name, font.size) == ("Helvetica", 12)

    def test_color_cascade(self):
        red = TemplateColor(r=1, g=0, b=0)
        blue = TemplateColor(r=0, g=0, b=1)
        assert resolve_color(red, TemplateDefaults(color=blue)) == red
        assert resolve_color(None, TemplateDefaults(color=blue)) == blue
        assert resolve_color(None, None) == FALLBACK_COLOR

    def test_behavior_cascade(self):
        defaults = TemplateDefaults(missing_field_behavior=MissingFieldBehavior.EMPTY_STRING)
        assert resolve_missing_field_behavior("use_default", defaults) == MissingFieldBehavior.USE_DEFAULT
        assert resolve_missing_field_behavior(None, defaults) == MissingFieldBehavior.EMPTY_STRING
        assert resolve_missing_field_behavior(None, None) == MissingFieldBehavior.LEAVE_PLACEHOLDER


# ═══════════════════════════════════════════════════════════════════════════════
# Draw plans
# ═══════════════════════════════════════════════════════════════════════════════


def _template(**overrides):
    raw = {
        "version": "1.0",
        "metadata": {"sourcePageCount": 2},
        "pages": [
            {
                "width": 612,
                "height": 792,
                "elements": [
                    {"type": "text", "content": "Literal {{x}}", "x": 40, "y": 752},
                    {
                        "type": "placeholder",
                        "content": "Name: {{name}}",
                        "x": 40,
                        "y": 738,
                        "font": {"name": "Helvetica", "size": 16, "weight": "bold"},
                        "color": {"r": 0.2, "g": 0.4, "b": 0.6},
                    },
                ],
            },
            {
                "width": 300,
                "height": 400,
                "elements": [
                    {"type": "placeholder", "content": "{{x}}", "fieldName": "x", "x": -5, "y": 900},
                ],
            },
        ],
        "fields": [
            {"name": "name", "defaultValue": "", "pages": [1]},
            {"name": "x", "defaultValue": "D", "pages": [2]},
        ],
        "fonts": {},
    }
    raw.update(overrides)
    return Template.model_validate(raw)


class TestRenderTemplate:

    def test_one_plan_per_page_with_page_size(self):
        plans = render_template(_template())
        assert [(p.width, p.height) for p in plans] == [(612, 792), (300, 400)]

    def test_text_elements_pass_through_verbatim(self):
        plans = render_template(_template(), {"x": "ignored"})
        assert plans[0].commands[0].text == "Literal {{x}}"

    def test_placeholders_resolved(self):
        plans = render_template(_template(), {"name": "Ada"})
        assert plans[0].commands[1].text == "Name: Ada"
        assert plans[1].commands[0].text == "{{x}}"

    def test_override_policy(self):
        plans = render_template(_template(), {}, "use_default")
        assert plans[1].commands[0].text == "D"

    def test_template_default_policy(self):
        template = _template(defaults={"missingFieldBehavior": "empty_string"})
        plans = render_template(template, {})
        assert plans[0].commands[1].text == "Name: "

    def test_font_and_color_applied(self):
        template = _template(
            defaults={"font": {"name": "Courier", "size": 10}, "color": {"r": 1, "g": 0, "b": 0}}
        )
        plans = render_template(template)
        plain, styled = plans[0].commands
        assert (plain.font_name, plain.font_size, plain.bold) == ("Courier", 10, False)
        assert plain.color == (1, 0, 0)
        assert (styled.font_name, styled.font_size, styled.bold) == ("Helvetica", 16, True)
        assert styled.color == (0.2, 0.4, 0.6)

    def test_off_page_coordinates_kept(self):
        cmd = render_template(_template())[1].commands[0]
        assert (cmd.x, cmd.y) == (-5, 900)

    def test_template_not_mutated(self):
        template = _template()
        before = template.to_dict()
        render_template(template, {"name": "Ada", "x": "1"}, "empty_string")
        assert template.to_dict() == before
