"""Unit tests for core/header.py"""

import datetime

from markupsafe import Markup

from mdsite.core.header import HeaderTag, absolutize_images, build_header, keywords_for


BASE = "https://example.com"


def test_build_header_basic_tags():
    head = build_header({"title": "Hello", "description": "A post", "canonical": "/post/"}, BASE)
    assert isinstance(head, Markup)
    assert "<title>Hello</title>" in head
    assert '<meta property="og:title" content="Hello">' in head
    assert '<meta name="twitter:title" content="Hello">' in head
    assert '<meta name="description" content="A post">' in head
    assert '<link rel="canonical" href="/post/">' in head
    assert '<meta property="og:url" content="https://example.com/post/">' in head


def test_build_header_escapes_values():
    head = build_header({"title": 'Tom & "Jerry"'}, BASE)
    assert "<title>Tom &amp; &#34;Jerry&#34;</title>" in head


def test_build_header_og_twitter_meta_maps():
    head = build_header({
        "og": {"type": "article", "nested": {"skip": 1}},
        "twitter": {"card": "summary"},
        "meta": {"robots": "noindex"},
    }, BASE)
    assert '<meta property="og:type" content="article">' in head
    assert '<meta name="twitter:card" content="summary">' in head
    assert '<meta name="robots" content="noindex">' in head
    assert "nested" not in head


def test_build_header_dates():
    head = build_header({"published": datetime.date(2024, 1, 10), "modified": "2024-02-01T12:00:00Z"}, BASE)
    assert 'content="2024-01-10T00:00:00+00:00"' in head
    assert '<meta property="article:modified_time" content="2024-02-01T12:00:00+00:00">' in head
    assert '<meta property="og:updated_time" content="2024-02-01T12:00:00+00:00">' in head


def test_absolutize_images():
    fields = {"image": "/img/a.png", "og": {"image": "img/b.png"}, "twitter": {"image": "http://cdn/c.png"}}
    out = absolutize_images(fields, BASE)
    assert out["image"] == "https://example.com/img/a.png"
    assert out["og"]["image"] == "https://example.com/img/b.png"
    assert out["twitter"]["image"] == "http://cdn/c.png"
    assert fields["image"] == "/img/a.png"


def test_keywords_from_tags_and_categories():
    assert keywords_for({"tags": ["a", "b"], "categories": ["C"]}) == "a, b, C"
    assert keywords_for({"keywords": ["x", "y"], "tags": ["a"]}) == "x, y"
    assert keywords_for({"keywords": "x y"}) == "x y"
    assert keywords_for({}) is None


def test_hreflang_alternates_and_x_default():
    fields = {
        "canonical": "/en/post/",
        "locale": "en",
        "hreflang": {"de": "/de/post/"},
    }
    head = build_header(fields, BASE, hreflang_default="en")
    assert '<link rel="alternate" hreflang="de" href="https://example.com/de/post/">' in head
    assert '<link rel="alternate" hreflang="en" href="https://example.com/en/post/">' in head
    assert '<link rel="alternate" hreflang="x-default" href="https://example.com/en/post/">' in head


def test_x_default_requires_known_language():
    head = build_header({"hreflang": {"de": "/de/"}}, BASE, hreflang_default="fr")
    assert "x-default" not in head


def test_header_tags_emitted_verbatim():
    preload = HeaderTag(name="link", attrs={"rel": "preload", "href": "/app.css", "as": "style"})
    head = build_header({"title": "T", "preload": preload}, BASE)
    assert '<link rel="preload" href="/app.css" as="style">' in head


def test_no_state_leaks_between_calls():
    build_header({"title": "First", "tags": ["one"]}, BASE)
    head = build_header({"title": "Second"}, BASE)
    assert "First" not in head
    assert "keywords" not in head
