from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import pandas as pd

LOGGER = logging.getLogger(__name__)


def save_csv(
    column_titles: Sequence[str],
    rows: Sequence[Sequence[str]],
    output_dir: str | Path,
    file_stem: str,
) -> Path:
    """Write the report body as ``<file_stem>.csv`` inside *output_dir*."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    target = output_path / f"{file_stem}.csv"
    frame = pd.DataFrame([list(row) for row in rows], columns=list(column_titles))
    frame.to_csv(target, index=False, encoding="utf-8")
    LOGGER.info("CSV report written to %s (%d rows)", target, len(frame))
    return target
