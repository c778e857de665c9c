from typing import Dict, List, Optional
from dominate import tags
from dominate.util import raw
import math
import html

# Donut chart (SVG) of mapping statuses, legend with counts and percent

_DEFAULT_COLORS = {
    "compatible": "#4caf50",  # green
    "warning": "#ff9800",     # orange
    "error": "#f44336",       # red
    "missing": "#9e9e9e",     # gray
}

def _pct2(value: float, total: float) -> float:
    """Percentage with two decimals, clamped to [0, 100]."""
    if total <= 0:
        return 0.0
    pct = (float(value) / float(total)) * 100.0
    pct = min(max(pct, 0.0), 100.0)
    return round(pct + 1e-12, 2)


def render_donut_block(
    title: str,
    values: Dict[str, int],
    *,
    segments: Optional[List[str]] = None,
    radius: int = 52,
    stroke: int = 18,
    center_label: Optional[str] = None,
    legend_labels: Optional[Dict[str, str]] = None,
    colors: Optional[Dict[str, str]] = None,
) -> tags.div:
    """
    Renders a donut card:
      - values:       e.g. {"compatible": 10, "warning": 2, "error": 1, "missing": 0}
      - segments:     keys to render, in order
      - center_label: text in the donut center (default = total)
      - colors:       key -> CSS color (default = status colors)
    """
    segments = list(segments or values.keys())
    legend_labels = legend_labels or {}
    colors = {**_DEFAULT_COLORS, **(colors or {})}

    safe_vals: Dict[str, int] = {}
    for k in segments:
        v = values.get(k, 0) or 0
        safe_vals[k] = v if isinstance(v, int) and not isinstance(v, bool) and v > 0 else 0
    total = sum(safe_vals.values())
    if center_label is None:
        center_label = str(total)

    r = radius - stroke / 2.0
    circumference = 2 * math.pi * r
    view = 2 * (radius + stroke)
    cx = cy = radius + stroke / 2.0

    svg_parts: List[str] = [f'<svg width="{view}" height="{view}" viewBox="0 0 {view} {view}" class="donut">']
    if total <= 0:
        svg_parts.append(
            f'<circle cx="{cx}" cy="{cy}" r="{r:.2f}" stroke="#e6e6e6" stroke-width="{stroke}" fill="none"></circle>'
        )
    else:
        offset = 0.0
        for k in segments:
            v = safe_vals[k]
            if v <= 0:
                continue
            dash = circumference * v / total
            tip = f"{legend_labels.get(k, k.title())}: {v} ({_pct2(v, total):.2f}%)"
            svg_parts.append(
                f'<g><title>{html.escape(tip)}</title>'
                f'<circle cx="{cx}" cy="{cy}" r="{r:.2f}" stroke="{colors.get(k, "#888")}" '
                f'stroke-width="{stroke}" fill="none" '
                f'stroke-dasharray="{dash:.3f} {circumference - dash:.3f}" '
                f'stroke-dashoffset="{-offset:.3f}" transform="rotate(-90 {cx} {cy})"></circle></g>'
            )
            offset += dash

    svg_parts.append(
        f'<text x="{cx}" y="{cy}" dominant-baseline="middle" text-anchor="middle" '
        f'class="donut-center">{html.escape(center_label)}</text>'
    )
    svg_parts.append("</svg>")

    card = tags.div(_class="donut-card")
    card.add(tags.div(title, _class="donut-title"))
    wrap = tags.div(_class="donut-wrap")
    wrap.add(raw("".join(svg_parts)))
    card.add(wrap)

    legend = tags.div(_class="donut-legend")
    for k in segments:
        v = safe_vals.get(k, 0)
        row = tags.div(_class="legend-row")
        row.add(tags.span(_class="legend-swatch", style=f"background:{colors.get(k, '#888')}"))
        row.add(tags.span(f"{legend_labels.get(k, k.title())}: {v} ({_pct2(v, total):.2f}%)",
                          _class="legend-text"))
        legend.add(row)
    card.add(legend)
    return card
