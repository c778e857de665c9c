import argparse
import json
import os
import re
from datetime import datetime
from typing import Any, Callable, Dict, List

from dominate import document, tags
from dominate.util import raw

from fieldmap.htmlutils import show_hide_div, show_all_button, hide_all_button, default_button
from fieldmap.reporting.viz.donut import render_donut_block
from fieldmap.reporting.viz.table import render_table_block
from fieldmap.reporting.viz.tree import render_field_tree

# ----------------------------
# Texts & small helpers
# ----------------------------
OUT_DIR = "results"
DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")
JS_PATH = os.path.join(DATA_DIR, "script.js")
CSS_PATH = os.path.join(DATA_DIR, "style.css")

STATUS_SEGMENTS = ["compatible", "warning", "error", "missing"]

RESULT_TEXT = {
    "valid": lambda n: "Every mapping is compatible with its target column.",
    "warning": lambda n: f"{n} mapping(s) need a look: conversions may lose data or need validation.",
    "error": lambda n: f"{n} mapping(s) are incompatible or reference fields/columns that no longer exist.",
}

_ISSUE_ORDER = {"missing": 0, "error": 1, "warning": 2, "compatible": 3}

_id_pat = re.compile(r"[^A-Za-z0-9_-]+")
def safe_id(s: str) -> str:
    return _id_pat.sub("_", s)

def overall_key(s: Any) -> str:
    v = str(s or "").strip().lower()
    return v if v in RESULT_TEXT else "warning"

def iter_mappings_issues_first(report: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Missing first, then errors, then warnings; compatible last. Stable within groups."""
    rows = list(report.get("mappings") or [])
    return sorted(rows, key=lambda r: _ISSUE_ORDER.get(str(r.get("status")), 2))

def badge_cell(text: str, kind: str) -> Callable[[], None]:
    return lambda: tags.span(text, cls=f"badge badge-{kind}")

def list_cell(items: List[str]) -> Any:
    if not items:
        return ""

    def build() -> None:
        with tags.ul():
            for x in items:
                tags.li(str(x))
    return build

# ----------------------------
# Sections
# ----------------------------

def render_intro_left(report: Dict[str, Any], *, src_path: str):
    sample_name = report.get("sample_name") or "sample"
    config_name = report.get("config_name") or "config"
    state = overall_key(report.get("overall"))
    flagged = sum(1 for r in report.get("mappings") or [] if r.get("status") != "compatible")

    tags.h1(f"Field mapping report for {sample_name}")
    tags.p(f"Target schema: {config_name}")
    tags.p("Generated on: " + datetime.now().strftime("%d/%m/%Y %H:%M:%S"))
    tags.p("Generated from: " + src_path)

    with tags.div(id="overall"):
        tags.h2("Validation result")
        tags.span(state, cls=f"status status-{state}")
        tags.p(RESULT_TEXT[state](flagged))

    extraction = report.get("extraction") or {}
    if extraction.get("errors") or extraction.get("warnings"):
        with show_hide_div("extraction_notes", hide=not extraction.get("errors")):
            tags.h3("Extraction notes")
            rows = [["error", e] for e in extraction.get("errors") or []]
            rows += [["warning", w] for w in extraction.get("warnings") or []]
            render_table_block(["Level", "Message"], rows)

    tags.h3("Quick visibility settings")
    show_all_button()
    hide_all_button()
    default_button()

def render_intro_right(report: Dict[str, Any]):
    counts = report.get("counts") or {}
    stats = report.get("statistics") or {}
    fstats = report.get("field_statistics") or {}

    with tags.div(_class="donut-stack"):
        render_donut_block(
            "Mappings by status",
            counts,
            segments=STATUS_SEGMENTS,
            radius=52, stroke=18,
            center_label=str(counts.get("TOTAL", 0)),
            colors=report.get("colors") or None,
        )
        render_donut_block(
            "Fields by kind",
            {"object": stats.get("objectFields", 0), "array": stats.get("arrayFields", 0),
             "primitive": stats.get("primitiveFields", 0)},
            segments=["object", "array", "primitive"],
            colors={"object": "#3f7fbf", "array": "#8e6fc1", "primitive": "#5aa9a3"},
        )
        with tags.div(_class="kpi-row"):
            for title, value in (
                ("Top-level fields", stats.get("totalFields", 0)),
                ("All fields", fstats.get("totalFields", 0)),
                ("Max depth", stats.get("maxDepth", 0)),
            ):
                with tags.div(_class="kpi"):
                    tags.div(title, _class="kpi-title")
                    tags.div(str(value), _class="kpi-value")

def render_mapping_table(report: Dict[str, Any]):
    rows = iter_mappings_issues_first(report)
    tags.h2("Mappings", id="mappings")
    if not rows:
        tags.p("No mappings were validated.")
        return
    with show_hide_div("mapping_table", hide=False):
        render_table_block(
            ["Mapping", "Source field", "Target column", "Status", "Issues", "Suggestions"],
            [[r.get("id"), r.get("source"), r.get("target"),
              badge_cell(str(r.get("status")), str(r.get("status"))),
              list_cell(r.get("issues") or []), list_cell(r.get("suggestions") or [])]
             for r in rows],
            row_classes=[str(r.get("status")) for r in rows],
        )

def render_fields(report: Dict[str, Any]):
    tags.h2("Extracted fields", id="fields")
    fields = report.get("fields") or []
    if not fields:
        tags.p("No fields were extracted.")
        return
    # large trees stay collapsed until asked for
    with show_hide_div("field_tree", hide=len(fields) > 50):
        render_field_tree(fields)

# ----------------------------
# Main
# ----------------------------

def build_document(report: Dict[str, Any], *, src_path: str) -> document:
    with open(JS_PATH, "r", encoding="utf-8") as js, open(CSS_PATH, "r", encoding="utf-8") as css:
        script = "\n" + js.read() + "\n"
        style = "\n" + css.read() + "\n"

    doc = document(title="Field mapping report")
    with doc.head:
        tags.style(raw(style))
        tags.script(raw(script), type="text/javascript")

    with doc:
        tags.button("Back to Top", onclick="backToTop()", id="topButton", cls="floatingbutton")
        with tags.div(cls="intro-grid"):
            with tags.div(cls="intro-left", id="intro"):
                render_intro_left(report, src_path=src_path)
            with tags.div(cls="intro-right"):
                render_intro_right(report)
        render_mapping_table(report)
        tags.hr()
        render_fields(report)
    return doc


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("-v", "--verification-profile",
                        help="Input report JSON produced by verify.py",
                        action="store", metavar="file", required=True)
    parser.add_argument("-o", "--output-file",
                        help="Name of output HTML",
                        action="store", metavar="outfile",
                        required=False, default="verification.html")
    args = parser.parse_args()

    with open(args.verification_profile, "r", encoding="utf-8") as f:
        report = json.load(f)

    doc = build_document(report, src_path=args.verification_profile)

    os.makedirs(OUT_DIR, exist_ok=True)
    out_path = os.path.join(OUT_DIR, os.path.basename(args.output_file))
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(str(doc))
