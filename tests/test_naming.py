import pytest

from actionhub.actions.naming import sanitize_function_name, to_snake_case


@pytest.mark.parametrize(
    "name,expected",
    [
        ("SendGrid", "send_grid"),
        ("Google Maps", "google_maps"),
        ("JSONBin", "json_bin"),
        ("Fly", "fly"),
        ("send_grid", "send_grid"),
        ("Café Bot", "cafe_bot"),
    ],
)
def test_to_snake_case(name, expected):
    assert to_snake_case(name) == expected


@pytest.mark.parametrize("name", ["SendGrid", "Google Maps", "JSONBin", "  Fly.io  "])
def test_to_snake_case_is_idempotent(name):
    once = to_snake_case(name)
    assert to_snake_case(once) == once


@pytest.mark.parametrize(
    "name,expected",
    [
        ("send_grid.send_email", "send_grid_send_email"),
        ("ghost.doesNotExist", "ghost_doesNotExist"),
        ("a..b--c", "a_b_c"),
        (".leading.and.trailing.", "leading_and_trailing"),
        ("résumé.parse", "resume_parse"),
        ("aשb.x", "a_b_x"),
        ("straße.x", "stra_e_x"),
    ],
)
def test_sanitize_function_name(name, expected):
    assert sanitize_function_name(name) == expected


def test_sanitize_function_name_is_idempotent():
    for name in ("send_grid.send_email", "x.y-z", "__a__.b"):
        once = sanitize_function_name(name)
        assert sanitize_function_name(once) == once


def test_untransliterable_characters_separate_instead_of_joining():
    assert sanitize_function_name("aשb") != sanitize_function_name("ab")
    assert to_snake_case("Fooשbar") == "foo_bar"
    assert to_snake_case("סנדגריד") == ""


def test_sanitize_function_name_output_is_tool_safe():
    result = sanitize_function_name("weird name!/with:stuff")
    assert result == "weird_name_with_stuff"
    assert all(ch.isalnum() or ch == "_" for ch in result)
