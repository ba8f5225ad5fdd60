import pytest

from themeshot.errors import EvaluationError
from themeshot.models import LogoCandidate
from themeshot.signals import (
    MAX_BUTTONS,
    MAX_HEADINGS,
    build_snapshot,
    clean_font_family,
    extract_buttons,
    extract_css_variables,
    extract_headings,
    extract_link_colors,
    find_logos,
    parse_elements,
    rank_logo_candidates,
)


def test_snapshot_from_page_dump(page_dump):
    snapshot = build_snapshot(page_dump)

    assert snapshot.css_variables == {"--text-color": "#212529", "--brand-primary-color": "#1a73e8"}
    assert [b.selector for b in snapshot.buttons] == [".btn", ".cta"]
    assert snapshot.buttons[0].background_color == "#ffffff"
    assert snapshot.buttons[0].text == "Sign in"
    assert snapshot.buttons[1].background_color == "#1a73e8"
    assert len(snapshot.buttons[1].text) == 50
    assert [n.selector for n in snapshot.navigation] == ["header"]
    assert [h.color for h in snapshot.headings] == ["#202124", "#5f6368", "#5f6368"]
    assert snapshot.headings[0].text == "Build faster with our platform"
    assert snapshot.links == ("#1a73e8", "#5f6368")
    assert snapshot.backgrounds == {"body": "#ffffff"}


def test_snapshot_fonts(page_dump):
    snapshot = build_snapshot(page_dump)
    assert snapshot.heading_font.font_family == "Google Sans, Arial, sans-serif"
    assert snapshot.heading_font.font_weight == "700"
    assert snapshot.body_font.font_family == "Roboto, Arial, sans-serif"
    assert snapshot.font_links == ("https://fonts.googleapis.com/css2?family=Roboto&display=swap",)

    fonts = snapshot.to_dict()["fonts"]
    assert fonts["fontLinks"] == [
        {"href": "https://fonts.googleapis.com/css2?family=Roboto&display=swap", "type": "external"}
    ]


def test_snapshot_logos_are_deduplicated_and_ranked(page_dump):
    logos = build_snapshot(page_dump).logos
    assert [(logo.kind, logo.score) for logo in logos] == [("img", 90), ("svg", 85)]
    assert logos[0].source_ref == "https://example.com/static/logo.png"
    assert logos[0].reason == "header-image-good-size"
    assert logos[1].to_dict()["innerHTML"].startswith("<svg")


def test_empty_dump_gives_empty_snapshot():
    snapshot = build_snapshot({})
    assert snapshot.css_variables == {}
    assert snapshot.buttons == ()
    assert snapshot.logos == ()
    assert snapshot.body_font is None


@pytest.mark.parametrize("raw", [None, "oops", 42, ["buttons"]])
def test_non_object_dump_is_an_evaluation_error(raw):
    with pytest.raises(EvaluationError):
        build_snapshot(raw)


def test_wrongly_typed_section_is_an_evaluation_error(page_dump):
    page_dump["buttons"] = "not a list"
    with pytest.raises(EvaluationError):
        build_snapshot(page_dump)


@pytest.mark.parametrize("dump", [
    {"rootVariables": [{"name": 5, "value": "#ff0000"}]},
    {"images": [{"kind": "img", "src": 123, "alt": ["logo"], "rect": {"top": 0, "width": 120, "height": 40},
                 "inHeader": True}]},
    {"images": [{"kind": "svg", "markup": {"tag": "svg"}, "rect": {"top": 0, "width": 120, "height": 40},
                 "inHeader": True}]},
    {"bodyFont": {"fontFamily": 12, "fontSize": 16}},
    {"headingFonts": [{"fontFamily": None}, {"fontFamily": ["Arial"]}]},
    {"buttons": [{"selector": 7, "backgroundColor": "#1a73e8", "className": {"a": 1}, "text": 3}]},
])
def test_wrongly_typed_fields_are_ignored(dump):
    snapshot = build_snapshot(dump)
    assert snapshot.css_variables == {}
    assert snapshot.logos == ()
    assert snapshot.body_font is None
    assert snapshot.heading_font is None
    assert all(b.selector == "" and b.class_name == "" and b.text == "" for b in snapshot.buttons)


def test_css_variables_need_color_in_name_and_a_visible_value():
    found = extract_css_variables([
        {"name": "--primary", "value": "#ff0000"},
        {"name": "--link-color", "value": "#00f"},
        {"name": "--bg-color", "value": "transparent"},
        {"name": "color", "value": "#000000"},
    ])
    assert found == {"--link-color": "#0000ff"}


def test_buttons_are_capped():
    records = [{"selector": "button", "backgroundColor": "rgb(0, 0, 255)"}] * (MAX_BUTTONS + 5)
    assert len(extract_buttons(records)) == MAX_BUTTONS


def test_button_cap_counts_colorless_matches():
    transparent = [{"selector": "button", "backgroundColor": "rgba(0, 0, 0, 0)"}] * MAX_BUTTONS
    colored = [{"selector": ".cta", "backgroundColor": "rgb(0, 0, 255)"}]
    assert extract_buttons(transparent + colored) == ()


def test_headings_take_first_five_in_document_order():
    records = [{"tag": "h%d" % (i % 3 + 1), "color": "rgb(%d, 0, 0)" % i} for i in range(8)]
    headings = extract_headings(records)
    assert len(headings) == MAX_HEADINGS
    assert [h.color for h in headings] == ["#000000", "#010000", "#020000", "#030000", "#040000"]


def test_link_colors_keep_first_occurrence_order():
    assert extract_link_colors(["#111", "rgb(0,0,0)", "#111111", "transparent"]) == ("#111111", "#000000")


def test_rank_logo_candidates_first_occurrence_wins():
    candidates = [
        LogoCandidate("a.png", 70, "logo-characteristics", 100, 40, "top-area"),
        LogoCandidate("b.png", 90, "header-image-good-size", 100, 40, "header"),
        LogoCandidate("a.png", 95, "header-image-good-size", 100, 40, "header"),
        LogoCandidate("", 99, "header-image-good-size", 100, 40, "header"),
        LogoCandidate("c.png", 70, "logo-characteristics", 100, 40, "top-area"),
        LogoCandidate("d.png", 80, "explicit-logo-selector", 100, 40, "explicit"),
    ]
    ranked = rank_logo_candidates(candidates)
    assert [c.source_ref for c in ranked] == ["b.png", "d.png", "a.png"]
    assert ranked[2].score == 70


def test_characteristic_logos_must_sit_near_the_top():
    elements = parse_elements([
        {"kind": "img", "src": "/img/brand-mark.png", "rect": {"top": 100, "width": 150, "height": 50}},
        {"kind": "img", "src": "/img/company.png", "rect": {"top": 700, "width": 150, "height": 50}},
        {"kind": "img", "src": "/img/photo.png", "alt": "Site logo", "rect": {"top": 0, "width": 150, "height": 50}},
    ])
    logos = find_logos(elements, viewport_height=800)
    assert [logo.source_ref for logo in logos] == ["/img/brand-mark.png", "/img/photo.png"]
    assert all(logo.position == "top-area" for logo in logos)


def test_clean_font_family_strips_quotes():
    assert clean_font_family("'Open Sans', \"Helvetica Neue\", sans-serif") == "Open Sans, Helvetica Neue, sans-serif"
