import json
import re
from pathlib import Path
from typing import Any, Final

from mpwatch.core.config import settings

DOC_ID_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def get_documents_root() -> Path:
    return Path(settings.DATA_DIR) / "documents"


def get_document_path(doc_id: str) -> Path:
    return get_documents_root() / f"{doc_id}.json"


def list_document_ids() -> list[str]:
    """
    Library layout: one JSON file per document.
        ...data/documents/<doc_id>.json
    """
    root = get_documents_root()
    if not root.exists():
        return []

    return sorted(p.stem for p in root.glob("*.json") if DOC_ID_RE.match(p.stem))


def read_document(doc_id: str) -> dict[str, Any]:
    if not DOC_ID_RE.match(doc_id or ""):
        raise FileNotFoundError("DOC_NOT_FOUND")

    p = get_document_path(doc_id)
    if not p.exists():
        raise FileNotFoundError("DOC_NOT_FOUND")

    data = json.loads(p.read_text(encoding="utf-8"))
    data.setdefault("id", doc_id)

    return data
