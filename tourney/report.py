from __future__ import annotations

"""
Board report generator
----------------------
This module writes a DOCX report for the rows currently on the board.

Design goals:
- Keep the board usable even if report dependencies are missing (lazy imports).
- Show the same rows, in the same order and with the same highlight, as the
  board itself (it takes the RowViews from a render).
- Pick charts that say something about the current selection: a multiplier
  histogram when there are multipliers, an area bar chart when more than one
  area is on the board.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import math
import os
import tempfile
from collections import Counter

from .models import Tournament
from .views import RowView


# -----------------------------
# Configuration types
# -----------------------------

@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Tournament Board Report"
    subtitle: str = "Poker tournament listings"
    source: Optional[str] = None

    # How many areas to show in the bar chart
    top_n: int = 10

    # How many rows to show in the listing table
    max_rows: int = 50

    # Optional: board commands that produced the current selection
    command_log: Optional[List[str]] = None
    query_string: Optional[str] = None


# row class -> table cell shading (hex RGB)
ROW_SHADING: Dict[str, str] = {
    "late-reg-expired": "D9D9D9",
    "hl-mult-50plus": "F4B6B6",
    "hl-mult-40plus": "F8CBAD",
    "hl-mult-30plus": "FFE699",
    "hl-mult-20plus": "E2EFDA",
    "hl-mult-10to19": "DDEBF7",
}


def _finite(values: Sequence[Optional[float]]) -> List[float]:
    """Drop None/NaN/inf."""
    return [float(v) for v in values if v is not None and math.isfinite(float(v))]


def _choose_bins(n: int) -> int:
    if n <= 20:
        return 5
    if n <= 100:
        return 10
    return 20


# -----------------------------
# Main entry point used by CLI
# -----------------------------

def generate_docx_report(
    rows: Sequence[Tournament],
    views: Sequence[RowView],
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
    scope_label: str = "Current board",
) -> str:
    """
    Generate a DOCX report + charts.

    `rows` are the Tournament records behind `views` (used for charts);
    `views` are the rendered rows in board order (used for the table).
    """
    config = config or ReportConfig()

    # Lazy imports: only required when "report" is used.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
        from docx.oxml import OxmlElement
        from docx.oxml.ns import qn
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        import numpy as np
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib (and numpy).\n"
            "Install with: python -m pip install matplotlib numpy"
        ) from e

    if not views:
        raise ValueError("No rows to report on (the board is empty).")

    # -----------------------------
    # 1) Stats
    # -----------------------------
    multipliers = _finite([r.multiplier for r in rows])
    fees = _finite([r.entry_fee for r in rows])
    c_area = Counter(r.area for r in rows if r.area)
    expired = sum(1 for v in views if v.expired)

    # -----------------------------
    # 2) Charts
    # -----------------------------
    with tempfile.TemporaryDirectory(prefix="tourney_report_") as tmpdir:
        # Each chart is: (title, file_path)
        chart_paths: List[Tuple[str, str]] = []

        def _save(filename: str) -> str:
            path = os.path.join(tmpdir, filename)
            plt.tight_layout()
            plt.savefig(path, dpi=200)
            plt.close()
            return path

        if multipliers:
            data = np.array(multipliers)
            plt.figure()
            counts, bins, patches = plt.hist(data, bins=_choose_bins(len(data)), edgecolor="black", linewidth=0.8)
            for i, p in enumerate(patches):
                p.set_facecolor("C0" if i % 2 == 0 else "C1")
            plt.axvline(float(np.median(data)), color="black", linestyle="--", linewidth=1)
            plt.title(f"Prize multiplier distribution ({scope_label})")
            plt.xlabel("Multiplier (total prize / entry cost)")
            plt.ylabel("Count")
            chart_paths.append((f"Prize multiplier distribution ({scope_label})", _save("hist_multiplier.png")))

        if len(c_area) > 1:
            top = c_area.most_common(config.top_n)
            plt.figure()
            plt.bar([k for k, _ in top], [v for _, v in top])
            plt.xticks(rotation=45, ha="right")
            plt.title(f"Listings by area ({scope_label})")
            plt.ylabel("Count")
            chart_paths.append((f"Listings by area ({scope_label})", _save("bar_area.png")))

        # -----------------------------
        # 3) Build DOCX report
        # -----------------------------
        doc = Document()

        style = doc.styles["Normal"]
        style.font.name = "Calibri"
        style._element.rPr.rFonts.set(qn("w:eastAsia"), "Meiryo")
        style.font.size = Pt(10)

        def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
            p = doc.add_paragraph()
            r = p.add_run(text)
            r.bold = bold
            r.italic = italic
            r.font.size = Pt(size)
            p.alignment = WD_ALIGN_PARAGRAPH.CENTER

        def _kv(key: str, value: str) -> None:
            p = doc.add_paragraph()
            r = p.add_run(f"{key}: ")
            r.bold = True
            p.add_run(value)

        def _shade(cell, hex_color: str) -> None:
            shd = OxmlElement("w:shd")
            shd.set(qn("w:val"), "clear")
            shd.set(qn("w:color"), "auto")
            shd.set(qn("w:fill"), hex_color)
            cell._tc.get_or_add_tcPr().append(shd)

        _center_title(config.title, 20, bold=True)
        _center_title(config.subtitle, 12, italic=True)

        doc.add_paragraph("")
        if config.source:
            _kv("Source", config.source)
        _kv("Scope", scope_label)
        _kv("Rows in scope", str(len(views)))
        _kv("Late registration closed", str(expired))
        if multipliers:
            _kv("Multiplier range", f"x{min(multipliers):.1f} to x{max(multipliers):.1f}")
        if fees:
            _kv("Entry fee range", f"{int(min(fees)):,} to {int(max(fees)):,}")
        if config.query_string:
            _kv("Board link query", "?" + config.query_string)

        if config.command_log:
            doc.add_paragraph("")
            doc.add_heading("Command log", level=1)
            doc.add_paragraph("These board commands produced this selection:")
            for line in config.command_log:
                doc.add_paragraph(line, style="List Bullet")

        if chart_paths:
            doc.add_paragraph("")
            doc.add_heading("Charts", level=1)
            for title, path in chart_paths:
                doc.add_paragraph(title)
                doc.add_picture(path, width=Inches(6.0))

        # Listing table in board order, shaded like the board
        doc.add_paragraph("")
        doc.add_heading("Listings", level=1)
        headers = ["Date", "Start", "Late", "Area", "Shop", "Title", "Fee", "Add-on", "Total prize", "Mult."]
        t = doc.add_table(rows=1, cols=len(headers))
        for i, h in enumerate(headers):
            t.rows[0].cells[i].text = h
        for v in list(views)[:config.max_rows]:
            cells = t.add_row().cells
            values = [v.date, v.start, v.late, v.area, v.shop_name, v.title,
                      v.entry_fee, v.add_on, v.total_prize, v.multiplier]
            for i, val in enumerate(values):
                cells[i].text = val
            color = ROW_SHADING.get(v.row_class)
            if color:
                for c in cells:
                    _shade(c, color)
        if len(views) > config.max_rows:
            doc.add_paragraph(f"... {len(views) - config.max_rows} more rows not shown.")

        # -----------------------------
        # Reproducibility footer
        # -----------------------------
        doc.add_paragraph("")
        doc.add_heading("Reproducibility footer", level=1)

        from . import __version__ as tourney_version
        from datetime import datetime as _dt
        generated_at = _dt.now().isoformat(timespec="seconds")

        doc.add_paragraph(f"tourney version: {tourney_version}")
        doc.add_paragraph(f"Report generated at: {generated_at}")

        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
        doc.save(out_path)
    return out_path
