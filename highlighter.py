import argparse
import json
import time
from collections import Counter
from dataclasses import dataclass, field
from html import escape
from pathlib import Path
from typing import Dict, List, Tuple

PALETTE = [
    "#5fa8d3",
    "#72b69d",
    "#bfa75c",
    "#c87f7f",
    "#999ca1",
    "#7fcad3",
    "#cb8b8b",
    "#9b9ea1",
    "#88c39d",
    "#c5ae6d",
]


@dataclass
class Match:
    offset: int
    length: int
    ids: List[str] = field(default_factory=list)
    match: str = ""

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def entity(self) -> str:
        """The entity the match is colored by: its first id."""
        return self.ids[0] if self.ids else ""


def load_matches(path: Path) -> List[Match]:
    """
    Read the output of ner.py, either JSON lines or a pretty-printed array.
    Duplicates and empty matches are dropped.
    """
    content = path.read_text(encoding="utf-8")
    if content.lstrip().startswith("["):
        records = json.loads(content)
    else:
        records = [json.loads(line) for line in content.splitlines() if line.strip()]

    matches: List[Match] = []
    seen = set()
    for record in records:
        key = (record["offset"], record["length"])
        if key in seen or record["length"] <= 0:
            continue
        seen.add(key)
        matches.append(
            Match(
                offset=record["offset"],
                length=record["length"],
                ids=list(record.get("ids", [])),
                match=record.get("match", ""),
            )
        )
    matches.sort(key=lambda m: m.offset)
    return matches


def highlight_text(text: str, matches: List[Match]) -> str:
    """Escape text and wrap every match in a highlight span.

    Offsets are character offsets into text. Matches never overlap.
    """
    parts: List[str] = []
    last = 0
    for m in matches:
        if m.offset < last or m.end > len(text):
            continue
        raw = escape(text[m.offset : m.end])
        if not raw.strip():
            continue
        parts.append(escape(text[last : m.offset]))
        title = f"{', '.join(m.ids)}: {m.match}"
        # newlines in a title attribute break the tooltip
        safe_title = escape(title, quote=True).replace("\n", " ")
        attrs = (
            f'class="highlight" data-entity="{escape(m.entity, quote=True)}"'
            f' data-ids="{escape(" ".join(m.ids), quote=True)}" id="match-{m.offset}"'
        )
        # one span per line so line numbering stays intact
        pieces = [
            f'<span {attrs} title="{safe_title}"><span class="inner">{piece}</span></span>'
            for piece in raw.split("\n")
        ]
        parts.append("\n".join(pieces))
        last = m.end
    parts.append(escape(text[last:]))
    return "".join(parts)


def entity_colors(entity_counts: Dict[str, int]) -> List[Tuple[str, str]]:
    return [
        (entity, PALETTE[i % len(PALETTE)])
        for i, entity in enumerate(sorted(entity_counts))
    ]


def generate_html(highlighted_text: str, entity_counts: Dict[str, int], show_line_numbers=True) -> str:
    lines = highlighted_text.splitlines(keepends=True)
    numbered_text = "".join(
        f"<span class='line'><span class='lineno'>{i:4}</span> {ln}</span>"
        for i, ln in enumerate(lines, start=1)
    )
    colors = entity_colors(entity_counts)
    entity_styles = "\n".join(
        f".highlight[data-entity=\"{escape(entity, quote=True)}\"] .inner {{ background: {color}; }}"
        for entity, color in colors
    )
    toggles = "\n".join(
        f"<label><input type='checkbox' checked data-entity=\"{escape(entity, quote=True)}\""
        f" onchange='toggleEntity(this)'> {escape(entity)} ({entity_counts[entity]})</label>"
        for entity in sorted(entity_counts)
    )
    lineno_display = "inline-block" if show_line_numbers else "none"
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<style>
body {{ font-family: monospace; background: #121212; color: #e0e0e0; }}
.highlight {{ border-bottom: 2px dotted #888; }}
.line {{ display: block; }}
.lineno {{ display: {lineno_display}; width: 3em; text-align: right; margin-right: 1em; color: #888; }}
pre {{ white-space: pre-wrap; }}
label {{ margin-right: 1em; }}
{entity_styles}
</style>
<script>
function toggleEntity(box) {{
    document.querySelectorAll('.highlight').forEach(el => {{
        if (el.dataset.entity === box.dataset.entity) {{
            el.firstChild.style.background = box.checked ? '' : 'transparent';
        }}
    }});
}}
</script>
</head>
<body>
<div>{toggles}</div>
<pre>{numbered_text}</pre>
</body>
</html>
"""


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Highlight recognized entities in a text file based on the JSON output of ner.py."
    )
    parser.add_argument("text_file", type=Path, help="Path to the input text file")
    parser.add_argument(
        "json_file",
        type=Path,
        help="Path to the JSON lines (or JSON array) file written by ner.py",
    )
    parser.add_argument(
        "output_file", type=Path, help="Path to save the output HTML file"
    )
    parser.add_argument(
        "--no-line-numbers",
        action="store_true",
        help="Disable line numbers by default in the HTML",
    )
    args = parser.parse_args(argv)

    # newline="" keeps offsets aligned with ner.py
    with args.text_file.open(encoding="utf-8", newline="") as f:
        text = f.read()
    matches = load_matches(args.json_file)

    t0 = time.time()
    highlighted = highlight_text(text, matches)
    t1 = time.time()

    print(f"Rendering: {t1-t0:.3f}s, Total matches: {len(matches)}")
    entity_counts = Counter(m.entity for m in matches)
    html = generate_html(
        highlighted, entity_counts, show_line_numbers=not args.no_line_numbers
    )
    args.output_file.write_text(html, encoding="utf-8")
    print(f"HTML file with highlights saved to: {args.output_file}")


if __name__ == "__main__":
    main()
