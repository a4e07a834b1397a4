from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import json
import pandas as pd

def _ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

def write_json(path: str | Path, obj: Any, *, indent: int = 2) -> Path:
    p = Path(path)
    _ensure_parent_dir(p)
    p.write_text(json.dumps(obj, indent=indent, ensure_ascii=False), encoding="utf-8")
    return p

def write_text(path: str | Path, text: str) -> Path:
    p = Path(path)
    _ensure_parent_dir(p)
    p.write_text(text, encoding="utf-8")
    return p

def write_frame(
    df: pd.DataFrame,
    path: str | Path,
    *,
    fmt: Optional[str] = None,
    csv_options: Optional[Dict] = None,
    json_lines: bool = False,
) -> Path:
    """
    Write a DataFrame as csv (default) or json/ndjson, picking the format from the extension.
    """
    csv_options = csv_options or {}
    p = Path(path)
    fmt = (fmt or p.suffix.lstrip(".") or "csv").lower()
    _ensure_parent_dir(p)

    if fmt in {"json", "ndjson"}:
        df.to_json(p, orient="records", lines=json_lines or fmt == "ndjson", force_ascii=False)
        return p
    if fmt != "csv":
        raise ValueError(f"Unsupported frame format: {fmt}")
    df.to_csv(p, index=False, **csv_options)
    return p
