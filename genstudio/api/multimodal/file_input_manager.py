"""
Multimodal attachment preprocessing.

Architectural role:
- Convert local files into `Attachment` values (CLI and other local callers).
- Classify attachments into the content parts of one chat turn.

Processing lifecycle (`load_attachment`):
1. Normalize the path and validate existence, size, and extension.
2. PDFs and images are read as bytes and base64-encoded.
3. Office and text formats are converted to plain text locally, since the
   service only accepts PDFs and images as inline binary.

Classification (`build_message_parts`):
- `application/pdf` -> inline binary part
- `image/*` -> inline binary part with the attachment's own MIME type
- anything else -> labelled text part
- user text is appended last, and omitted when blank

Error handling strategy:
- Validation failures raise `ValueError` with a short reason.
- Extraction failures from `python-docx`/`pandas` propagate unchanged.

Determinism considerations:
- Part order always follows attachment order.
"""

import base64
import os
from typing import List, Optional, Sequence

import docx
import pandas as pd

from genstudio.llm.types import Attachment, InlineDataPart, Part, TextPart
from genstudio.prompting.prompt_builder import build_file_context


# ============================================================
# CONFIG
# ============================================================

MAX_FILE_SIZE_MB = 10
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
MAX_TABLE_ROWS = 200

BINARY_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}

TEXT_MIME_TYPES = {
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".json": "application/json",
    ".csv": "text/csv",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

ALLOWED_EXTENSIONS = set(BINARY_MIME_TYPES) | set(TEXT_MIME_TYPES)

PDF_MIME_TYPE = "application/pdf"


# ============================================================
# PART CLASSIFICATION
# ============================================================

def is_inline_mime_type(mime_type: str) -> bool:
    """Return whether the service accepts this MIME type as inline binary."""
    return mime_type == PDF_MIME_TYPE or mime_type.startswith("image/")


def attachment_to_part(attachment: Attachment) -> Part:
    """Classify one attachment into its content part."""
    if is_inline_mime_type(attachment.mime_type):
        return InlineDataPart(mime_type=attachment.mime_type, data=attachment.data)
    return TextPart(text=build_file_context(attachment.name, attachment.data))


def build_message_parts(
    message: str,
    attachments: Sequence[Attachment] = (),
) -> List[Part]:
    """
    Build the ordered content parts for the current chat turn.

    Attachment parts come first in attachment order; the user's text follows
    as the last part unless it is blank.
    """
    parts = [attachment_to_part(att) for att in attachments]

    if message and message.strip():
        parts.append(TextPart(text=message))

    return parts


# ============================================================
# FILE LOADING
# ============================================================

def load_attachment(path: str) -> Attachment:
    """
    Read a local file into an `Attachment`.

    Raises:
        ValueError: Invalid path, missing file, oversized file, or
            unsupported extension.
    """
    normalized = _normalize_path(path)
    _validate_file(normalized)

    name = os.path.basename(normalized)
    ext = _extension(normalized)

    if ext in BINARY_MIME_TYPES:
        with open(normalized, "rb") as f:
            encoded = base64.b64encode(f.read()).decode("ascii")
        return Attachment(name=name, mime_type=BINARY_MIME_TYPES[ext], data=encoded)

    return Attachment(
        name=name,
        mime_type=TEXT_MIME_TYPES[ext],
        data=_extract_text(normalized, ext),
    )


def load_attachments(paths: Sequence[str]) -> List[Attachment]:
    """Load several files, preserving the given order."""
    return [load_attachment(p) for p in paths]


# ============================================================
# VALIDATION
# ============================================================

def _normalize_path(path: str) -> Optional[str]:
    """Expand and canonicalize a path; return `None` for empty input."""
    if not path:
        return None
    expanded = os.path.expanduser(path)
    return os.path.realpath(expanded)


def _extension(path: str) -> str:
    _, ext = os.path.splitext(path)
    return ext.lower()


def _validate_file(path: Optional[str]):
    """
    Enforce existence, size, and file-type constraints before reading.
    """
    if not path:
        raise ValueError("Invalid file path")

    if not os.path.isfile(path):
        raise ValueError(f"File does not exist: {path}")

    if os.path.getsize(path) > MAX_FILE_SIZE_BYTES:
        raise ValueError(f"File exceeds max size limit of {MAX_FILE_SIZE_MB} MB")

    if _extension(path) not in ALLOWED_EXTENSIONS:
        raise ValueError(f"Unsupported file type: {_extension(path) or '(none)'}")


# ============================================================
# TEXT EXTRACTION
# ============================================================

def _extract_text(path: str, ext: str) -> str:
    """Dispatch text extraction by extension."""

    if ext == ".docx":
        return _extract_docx(path)

    if ext == ".csv":
        return _extract_table(pd.read_csv(path))

    if ext == ".xlsx":
        return _extract_table(pd.read_excel(path))

    return _extract_txt(path)


def _extract_txt(path: str) -> str:
    """Read UTF-8 text with decoding errors ignored."""
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        return f.read()


def _extract_table(df: "pd.DataFrame") -> str:
    """Serialize the first `MAX_TABLE_ROWS` rows of a dataframe."""
    return df.head(MAX_TABLE_ROWS).to_string()


def _extract_docx(path: str) -> str:
    """Extract paragraph text from a DOCX document."""
    doc = docx.Document(path)
    return "\n".join(p.text for p in doc.paragraphs)
