"""
Scan history export (CSV).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd


BASE_COLUMNS = ["scan_id", "timestamp", "source", "scanned", "1D", "gs1"]


def _flatten_scan(scan: Dict[str, Any]) -> Dict[str, Any]:
    parsed = scan.get("parsed") or {}
    row: Dict[str, Any] = {
        "scan_id": scan.get("scan_id"),
        "timestamp": scan.get("timestamp"),
        "source": scan.get("source"),
        "scanned": scan.get("scanned"),
        "1D": parsed.get("1D"),
        "gs1": None,
    }
    for key, value in (parsed.get("2D") or {}).items():
        if key == "gs1":
            row["gs1"] = value
        else:
            row[f"AI {key}"] = value
    return row


def to_dataframe(scans: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    One row per scan. Decoded AI values get one ``"AI <code>"`` column per
    code seen, in order of first appearance.
    """
    rows = [_flatten_scan(scan) for scan in scans]
    columns = list(BASE_COLUMNS)
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    return pd.DataFrame(rows, columns=columns)


def export_csv(df: pd.DataFrame, filename: Union[str, Path], exports_dir: Optional[Path] = None) -> Path:
    path = Path(filename)
    if exports_dir is not None:
        exports_dir.mkdir(parents=True, exist_ok=True)
        path = exports_dir / path
    df.to_csv(path, index=False)
    return path
