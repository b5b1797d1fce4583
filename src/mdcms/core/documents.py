"""Document codec: posts and pages to and from JSON or Markdown with frontmatter"""

from typing import Optional, TypeVar

from pydantic import ValidationError

from mdcms.app_logger import get_logger
from mdcms.core.frontmatter import parse_frontmatter, serialize_frontmatter, split_list
from mdcms.core.models import Document, Post, StorageFormat


logger = get_logger("documents")

D = TypeVar("D", bound=Document)

REQUIRED_KEYS = ("id", "title", "slug")
POST_REQUIRED_KEYS = REQUIRED_KEYS + ("date",)
LIST_KEYS = ("categories", "tags")


def document_frontmatter(doc: Document) -> dict:
    """Frontmatter mapping for a document: alias keys, None and empty lists dropped, no content."""
    data = doc.model_dump(by_alias=True, exclude_none=True, exclude={"content"}, mode="json")
    return {k: v for k, v in data.items() if v != []}


def document_to_markdown(doc: Document) -> str:
    return serialize_frontmatter(document_frontmatter(doc), doc.content)


def document_to_json(doc: Document) -> str:
    return doc.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def document_from_markdown(raw: str, model: type[D]) -> Optional[D]:
    """Decode Markdown with frontmatter. Returns None when required keys are missing or invalid."""
    frontmatter, body = parse_frontmatter(raw)
    required = POST_REQUIRED_KEYS if issubclass(model, Post) else REQUIRED_KEYS
    missing = [k for k in required if frontmatter.get(k) in (None, "")]
    if missing:
        logger.warning("Frontmatter missing required keys: %s", ", ".join(missing))
        return None

    data: dict = {}
    for key, value in frontmatter.items():
        if key in LIST_KEYS:
            data[key] = split_list(value)
        elif isinstance(value, bool):
            # Every document field is textual; a bare true/false is read back as text.
            data[key] = str(value).lower()
        else:
            data[key] = value
    data["content"] = body.strip()
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid %s frontmatter: %s", model.__name__, e)
        return None


def document_from_json(raw: str, model: type[D]) -> Optional[D]:
    """Decode a JSON document. Returns None for malformed JSON or schema mismatches."""
    try:
        return model.model_validate_json(raw)
    except ValidationError as e:
        logger.warning("Invalid %s JSON: %s", model.__name__, e)
        return None


def encode_document(doc: Document, fmt: StorageFormat) -> str:
    if fmt is StorageFormat.markdown:
        return document_to_markdown(doc)
    return document_to_json(doc)


def decode_document(raw: str, fmt: StorageFormat, model: type[D]) -> Optional[D]:
    if fmt is StorageFormat.markdown:
        return document_from_markdown(raw, model)
    return document_from_json(raw, model)
