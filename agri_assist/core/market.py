"""
Parsing of market price answers.

The model answers with a prose summary followed by a pipe-delimited markdown
table (Market Name | Price | Date). Rows are matched to grounding citations by
position only: row i gets citation i when one exists.
"""

from typing import List, Optional, Sequence

from .types import Citation, MarketPriceResult

PLACEHOLDER = "N/A"


def _is_table_line(line: str) -> bool:
    return line.startswith("|") and line.endswith("|")


def split_summary(markdown: str) -> str:
    """Return the prose that precedes the first table line."""
    summary_lines = []
    for line in markdown.splitlines():
        if _is_table_line(line.strip()):
            break
        summary_lines.append(line)
    return "\n".join(summary_lines).strip()


def parse_table_row(line: str) -> List[str]:
    """Split a table line on '|' and trim each cell, dropping the outer empty cells."""
    cells = [cell.strip() for cell in line.split("|")]
    return cells[1:-1]


def parse_market_table(markdown: str, crop_name: str, sources: Optional[Sequence[Citation]] = None) -> List[MarketPriceResult]:
    """
    Parse the price table of a market price answer.

    The first two table lines (header and separator) are skipped. Every remaining
    line yields one record in input order; missing or empty cells become "N/A".

    Args:
        markdown: Full model answer
        crop_name: Crop the prices were requested for
        sources: Grounding citations, matched to rows by position

    Returns:
        One MarketPriceResult per data row, or an empty list when there is no table
    """
    sources = list(sources or [])
    table_lines = [line for line in (raw.strip() for raw in markdown.splitlines()) if _is_table_line(line)]
    if len(table_lines) < 3:
        return []

    results = []
    for index, line in enumerate(table_lines[2:]):
        cells = parse_table_row(line)
        cells += [""] * (3 - len(cells))
        results.append(
            MarketPriceResult(
                crop_name=crop_name,
                market_name=cells[0] or PLACEHOLDER,
                price=cells[1] or PLACEHOLDER,
                date=cells[2] or PLACEHOLDER,
                source=sources[index] if index < len(sources) else None,
            )
        )
    return results
