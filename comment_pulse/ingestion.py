"""Turn pasted text and uploaded files into :class:`Comment` objects.

Supported inputs:

* pasted text or ``.txt`` / ``.text`` files: one comment per non-blank line;
* ``.csv`` files: the comment column is guessed from the header row.
"""
from __future__ import annotations

import csv
import io
import logging
import uuid
from typing import List, Optional, Sequence, Union

from comment_pulse.exceptions import IngestionError, UnsupportedFileTypeError
from comment_pulse.reporting.models import Comment

logger = logging.getLogger(__name__)

# Header fragments that identify the comment column, in priority order per column
COMMENT_HEADER_KEYWORDS = ("comment", "feedback", "text", "message", "review", "response")

TEXT_EXTENSIONS = (".txt", ".text")
CSV_EXTENSIONS = (".csv",)
SUPPORTED_EXTENSIONS = CSV_EXTENSIONS + TEXT_EXTENSIONS


def _batch_token() -> str:
    return uuid.uuid4().hex[:8]


def _lines_to_comments(
    content: str, *, id_prefix: str, source: Optional[str]
) -> List[Comment]:
    token = _batch_token()
    comments: List[Comment] = []
    for index, line in enumerate(content.splitlines()):
        text = line.strip()
        if text:
            comments.append(
                Comment(id=f"{id_prefix}-{token}-{index}", text=text, source=source)
            )
    return comments


def parse_pasted_text(text: str, *, id_prefix: str = "manual") -> List[Comment]:
    """Return one comment per non-blank line of *text*."""
    return _lines_to_comments(text or "", id_prefix=id_prefix, source=None)


def parse_text_file(content: str, *, filename: str) -> List[Comment]:
    """Return one comment per non-blank line, tagged with *filename*."""
    return _lines_to_comments(content, id_prefix="file", source=filename)


def detect_comment_column(header: Sequence[str]) -> int:
    """Return the index of the first header cell naming a comment column.

    Falls back to column ``0`` when no header matches.
    """
    for index, cell in enumerate(header):
        name = cell.strip().strip('"').lower()
        if any(keyword in name for keyword in COMMENT_HEADER_KEYWORDS):
            return index
    return 0


def parse_csv(content: str, *, filename: str) -> List[Comment]:
    """Return comments from the detected column of a CSV document.

    Quoted fields (including embedded commas and doubled quotes) are handled
    by the :mod:`csv` module. Rows with an empty or missing comment cell are
    skipped.
    """
    try:
        rows = list(csv.reader(io.StringIO(content)))
    except csv.Error as exc:
        raise IngestionError(f"Could not parse CSV file '{filename}': {exc}") from exc

    if not rows:
        return []

    column = detect_comment_column(rows[0])
    logger.debug("Using column %d of %s for comments", column, filename)

    token = _batch_token()
    comments: List[Comment] = []
    for index, row in enumerate(rows[1:], start=1):
        if column >= len(row):
            continue
        text = row[column].strip()
        if text:
            comments.append(
                Comment(id=f"file-{token}-{index}", text=text, source=filename)
            )
    return comments


def is_supported_filename(filename: str) -> bool:
    return filename.lower().endswith(SUPPORTED_EXTENSIONS)


def _decode(filename: str, content: Union[str, bytes]) -> str:
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise IngestionError(f"File '{filename}' is not valid UTF-8 text.") from exc


def load_file(filename: str, content: Union[str, bytes]) -> List[Comment]:
    """Parse an uploaded file by extension.

    Raises
    ------
    UnsupportedFileTypeError
        If the extension is not .csv, .txt or .text.
    IngestionError
        If the content cannot be decoded or parsed.
    """
    lowered = filename.lower()
    if lowered.endswith(CSV_EXTENSIONS):
        comments = parse_csv(_decode(filename, content), filename=filename)
    elif lowered.endswith(TEXT_EXTENSIONS):
        comments = parse_text_file(_decode(filename, content), filename=filename)
    else:
        raise UnsupportedFileTypeError(filename)

    logger.info("file_loaded", extra={"source": filename, "comments": len(comments)})
    return comments
