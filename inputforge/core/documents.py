"""JSON document helpers shared by config, manifest and lockfile I/O.

Documents are pretty-printed with two-space indentation and a trailing
newline so textual diffs stay stable. Writes go to a sibling temporary
file which is then renamed over the destination.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from inputforge.errors import ParseError

ModelT = TypeVar("ModelT", bound=BaseModel)


def render_json(data: Any) -> str:
    """Serialize ``data`` as two-space indented JSON with a trailing newline."""
    return json.dumps(data, indent=2, sort_keys=True) + "\n"


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` via a sibling temp file and ``os.replace``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def write_document(path: Path, data: Any) -> str:
    """Atomically write ``data`` as a JSON document; returns the rendered text."""
    text = render_json(data)
    atomic_write_text(path, text)
    return text


def read_document(path: Path, model: type[ModelT]) -> ModelT:
    """Read and validate a JSON document, raising ParseError on bad content."""
    raw = Path(path).read_bytes()
    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        raise ParseError(path, str(exc)) from exc
