import pytest

from bunkit.tagparser import Tag, parse

TAG_TESTS = [
    ("", "", {}),
    ("hello", "hello", {}),
    ("hello,world", "hello", {"world": [""]}),
    ('"hello,world\'', "", {}),
    ('"hello:world"', "hello:world", {}),
    (",hello", "", {"hello": [""]}),
    (",hello,world", "", {"hello": [""], "world": [""]}),
    ("hello:", "", {"hello": [""]}),
    ("hello:world", "", {"hello": ["world"]}),
    ("hello:world,foo", "", {"hello": ["world"], "foo": [""]}),
    ("hello:world,foo:bar", "", {"hello": ["world"], "foo": ["bar"]}),
    ('hello:"world1,world2"', "", {"hello": ["world1,world2"]}),
    ('hello:"world1,world2",world3', "", {"hello": ["world1,world2"], "world3": [""]}),
    ('hello:"world1:world2",world3', "", {"hello": ["world1:world2"], "world3": [""]}),
    (
        'hello:"D\'Angelo, esquire",foo:bar',
        "",
        {"hello": ["D'Angelo, esquire"], "foo": ["bar"]},
    ),
    ('hello:"world(\'foo\', \'bar\')"', "", {"hello": ["world('foo', 'bar')"]}),
    (" hello,foo: bar ", " hello", {"foo": [" bar "]}),
    ("foo:bar(hello, world)", "", {"foo": ["bar(hello, world)"]}),
    ("foo:bar(hello(), world)", "", {"foo": ["bar(hello(), world)"]}),
    ("type:geometry(POINT, 4326)", "", {"type": ["geometry(POINT, 4326)"]}),
    ("foo:bar,foo:baz", "", {"foo": ["bar", "baz"]}),
]


@pytest.mark.parametrize("text,name,options", TAG_TESTS)
def test_tag_parser(text, name, options):
    tag = parse(text)
    assert tag.name == name
    assert tag.options == options


def test_empty_tag_is_zero():
    assert parse("").is_zero()


def test_named_tag_is_not_zero():
    assert not parse("hello").is_zero()


def test_options_only_tag_is_not_zero():
    assert not parse(",pk").is_zero()


def test_has_option():
    tag = parse("id,pk,autoincrement")
    assert tag.has_option("pk")
    assert tag.has_option("autoincrement")
    assert not tag.has_option("notnull")


def test_option_returns_last_value():
    tag = parse("foo:bar,foo:baz")
    assert tag.option("foo") == "baz"


def test_option_missing_is_none():
    assert parse("hello").option("type") is None


def test_option_with_empty_value():
    assert parse(",pk").option("pk") == ""


def test_tag_default_construction():
    tag = Tag()
    assert tag.is_zero()
    assert tag.options == {}