"""Shared fixtures for core unit tests"""

import pytest

from mdsite.core.models import Document


SAMPLE_FM_MD = """\
---
title: Test Doc
slug: test-doc
published: 2024-01-10
modified: 2024-01-12
tags: [python, web]
categories: [Tutorials]
---

# Title

Body content.
"""


@pytest.fixture(name="make_doc")
def make_doc_fixture():
    """Factory for built Documents: make_doc('blog/a.md', tags=[...], modified='2024-01-01')."""
    def _make(source_path: str, body: str = "", url: str = None, **fields) -> Document:
        url = url if url is not None else source_path.rsplit(".", 1)[0] + "/"
        return Document(
            source_path=source_path,
            fields=fields,
            body=body,
            generated_url=url,
            absolute_url=f"https://example.com/{url}",
        )
    return _make


@pytest.fixture(name="source_root")
def source_root_fixture(tmp_path):
    root = tmp_path / "content"
    root.mkdir()
    return root


@pytest.fixture(name="sample_fm_md")
def sample_fm_md_fixture():
    return SAMPLE_FM_MD
