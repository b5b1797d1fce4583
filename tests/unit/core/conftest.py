"""Shared fixtures for core unit tests"""

import pytest

from mdcms.core.models import Page, Post


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text.

## Heading 2

- item one
- item two

```python
print("hello")
```

Footer paragraph.
"""


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="post")
def post_fixture():
    """A fully populated published post."""
    return Post(
        id="post-1",
        title="Hello: World",
        slug="hello-world",
        content="# Hi\n\nBody text.",
        excerpt="Short intro",
        author="Ada",
        date="2024-05-01T10:00:00.000Z",
        status="published",
        categories=["news", "tech"],
        tags=["python"],
    )


@pytest.fixture(name="page")
def page_fixture():
    return Page(id="page-1", title="About", slug="about", content="About us.")
