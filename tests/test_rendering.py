"""Tests for template rendering."""

from __future__ import annotations

import pytest

from app.application.use_cases.notifications import render_template


def test_independent_conditional_blocks_are_resolved_separately() -> None:
    template = "{{#if a}}A{{/if}}-{{#if b}}B{{/if}}-{{#if c}}C{{/if}}-{{#if d}}D{{/if}}"

    rendered = render_template(template, {"a": "1", "b": "", "c": "x", "d": None})

    assert rendered == "A--C-"


def test_block_keeps_inner_placeholders_when_truthy() -> None:
    template = (
        "<p>{{task_title}}</p>\n"
        "{{#if plant_name}}\n<p><strong>Planta:</strong> {{plant_name}}</p>\n{{/if}}"
    )

    rendered = render_template(template, {"task_title": "Regar", "plant_name": "Tomate"})

    assert rendered == "<p>Regar</p>\n\n<p><strong>Planta:</strong> Tomate</p>\n"


def test_falsy_block_is_removed_with_its_contents() -> None:
    template = "Olá{{#if garden_name}}, jardim {{garden_name}}{{/if}}!"

    assert render_template(template, {"garden_name": None}) == "Olá!"


def test_unknown_and_none_placeholders_stay_untouched() -> None:
    template = "Olá {{user_name}}, {{unknown}} {{plant_name}}"

    rendered = render_template(template, {"user_name": "Ana", "plant_name": None})

    assert rendered == "Olá Ana, {{unknown}} {{plant_name}}"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (True, "true"),
        (False, "false"),
        (3, "3"),
        (2.5, "2.5"),
        ("texto", "texto"),
    ],
)
def test_values_are_stringified(value, expected) -> None:
    assert render_template("{{value}}", {"value": value}) == expected


def test_values_are_not_html_escaped() -> None:
    assert render_template("{{x}}", {"x": "<b>&</b>"}) == "<b>&</b>"


@pytest.mark.parametrize("template", [None, ""])
def test_empty_template_renders_empty_string(template) -> None:
    assert render_template(template, {"a": 1}) == ""


@pytest.mark.parametrize(
    ("variables", "expected"),
    [
        ({"plant_name": "Tomate", "garden_name": "Tenda"}, "<p>Tomate</p><p>Tenda</p>"),
        ({"plant_name": "Tomate", "garden_name": None}, "<p>Tomate</p>"),
        ({"plant_name": None, "garden_name": "Tenda"}, ""),
    ],
)
def test_nested_blocks(variables, expected) -> None:
    template = (
        "{{#if plant_name}}<p>{{plant_name}}</p>"
        "{{#if garden_name}}<p>{{garden_name}}</p>{{/if}}{{/if}}"
    )

    assert render_template(template, variables) == expected
