"""Unit tests for core/parse.py"""

import datetime

import pytest

from mdsite.core.models import Document
from mdsite.core.parse import (
    ParseError,
    discover_files,
    is_list_index,
    parse_file,
    parse_text,
    partition_files,
    split_frontmatter,
)


def test_split_frontmatter_with_yaml():
    """split_frontmatter extracts the YAML header and returns the body."""
    fm, body = split_frontmatter("---\ntitle: Hello\n---\n# Body\n")
    assert fm == {"title": "Hello"}
    assert body == "# Body\n"


def test_split_frontmatter_no_frontmatter():
    """Without a leading delimiter the whole text is the body."""
    text = "# No frontmatter\n"
    fm, body = split_frontmatter(text)
    assert fm == {}
    assert body == text


def test_split_frontmatter_empty_block():
    fm, body = split_frontmatter("---\n---\nBody\n")
    assert fm == {}
    assert body == "Body\n"


def test_split_frontmatter_unterminated():
    """A missing closing delimiter is a ParseError."""
    with pytest.raises(ParseError, match="Unterminated"):
        split_frontmatter("---\ntitle: Hello\n# Body\n")


def test_split_frontmatter_invalid_yaml():
    with pytest.raises(ParseError, match="Invalid YAML"):
        split_frontmatter("---\nkey: [unclosed\n---\nBody\n")


def test_split_frontmatter_not_a_mapping():
    with pytest.raises(ParseError, match="expected a mapping"):
        split_frontmatter("---\n- a\n- b\n---\nBody\n")


def test_parse_error_is_value_error():
    assert issubclass(ParseError, ValueError)


def test_parse_text_keeps_values_verbatim():
    """Strings, lists, nested maps and dates survive parsing unchanged."""
    doc = parse_text(
        "---\ntitle: Post\ntags: [a, b]\nog:\n  type: article\npublished: 2024-01-10\n---\nBody\n",
        "blog/post.md",
    )
    assert isinstance(doc, Document)
    assert doc.source_path == "blog/post.md"
    assert doc.fields["title"] == "Post"
    assert doc.fields["tags"] == ["a", "b"]
    assert doc.fields["og"] == {"type": "article"}
    assert doc.fields["published"] == datetime.date(2024, 1, 10)
    assert doc.body == "Body\n"
    assert doc.rendered_content is None
    assert doc.generated_url is None


def test_parse_text_preserves_field_order():
    doc = parse_text("---\nzeta: 1\nalpha: 2\nmid: 3\n---\n")
    assert list(doc.fields) == ["zeta", "alpha", "mid"]


def test_parse_file_sample(tmp_path, sample_fm_md):
    (tmp_path / "doc.md").write_text(sample_fm_md)
    doc = parse_file(tmp_path, "doc.md")
    assert doc.title == "Test Doc"
    assert doc.tags == ["python", "web"]
    assert doc.categories == ["Tutorials"]
    assert "# Title" in doc.body
    assert "---" not in doc.body


def test_parse_file_error_names_file(tmp_path):
    """ParseError raised by parse_file carries the relative path."""
    (tmp_path / "bad.md").write_text("---\ntitle: x\n")
    with pytest.raises(ParseError, match="bad.md"):
        parse_file(tmp_path, "bad.md")


def test_discover_files_recursive_sorted(tmp_path):
    """discover_files finds .md/.mdx files recursively as sorted relative POSIX paths."""
    (tmp_path / "b.md").write_text("b")
    sub = tmp_path / "blog"
    sub.mkdir()
    (sub / "a.mdx").write_text("a")
    (sub / "notes.txt").write_text("text")
    assert discover_files(tmp_path) == ["b.md", "blog/a.mdx"]


def test_discover_files_skips_embargo_files(tmp_path):
    (tmp_path / "post.md").write_text("a")
    (tmp_path / "post.1.emb.md").write_text("b")
    assert discover_files(tmp_path) == ["post.md"]


def test_partition_files():
    """index.<ext> files are listings; everything else is content."""
    files = ["blog/a.md", "blog/index.md", "index.md", "blog/reindex.md"]
    content, lists = partition_files(files)
    assert content == ["blog/a.md", "blog/reindex.md"]
    assert lists == ["blog/index.md", "index.md"]


@pytest.mark.parametrize("path,expected", [
    ("index.md", True),
    ("blog/index.mdx", True),
    ("blog/myindex.md", False),
    ("blog/index-of-things.md", False),
])
def test_is_list_index(path, expected):
    assert is_list_index(path) is expected


def test_split_frontmatter_non_string_keys():
    """Keys YAML loads as int or bool are kept as strings."""
    fm, _ = split_frontmatter("---\ntitle: T\n2024: archived\non: true\n---\nbody\n")
    assert fm == {"title": "T", "2024": "archived", "True": True}


def test_parse_text_non_string_keys():
    doc = parse_text("---\ntitle: T\npublished: 2024-01-01\n2024: archived\n---\nbody\n")
    assert doc.fields["2024"] == "archived"
    assert doc.title == "T"


def test_parse_file_strips_bom(tmp_path):
    (tmp_path / "bom.md").write_bytes("\ufeff---\ntitle: Bom\n---\nBody\n".encode("utf-8"))
    doc = parse_file(tmp_path, "bom.md")
    assert doc.title == "Bom"
    assert doc.body == "Body\n"


def test_parse_file_invalid_utf8(tmp_path):
    (tmp_path / "latin.md").write_bytes(b"---\ntitle: caf\xe9\n---\nBody\n")
    with pytest.raises(ParseError, match="latin.md: not valid UTF-8"):
        parse_file(tmp_path, "latin.md")
