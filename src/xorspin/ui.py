from typing import Optional, Sequence

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from xorspin.models.analysis_result import AnalysisResult, SingleAnalysis


COLORS = {
    "highlight": "bold yellow on black",
    "high_match": "bold",
    "percentage": {
        "strong": "green",
        "high": "yellow",
        "low": "red",
    },
}


def percentage_style(match_percentage: float, high: float = 10.0, strong: float = 20.0) -> str:
    """Colour for a match percentage in the ranked view."""
    if match_percentage > strong:
        return COLORS["percentage"]["strong"]
    if match_percentage > high:
        return COLORS["percentage"]["high"]
    return COLORS["percentage"]["low"]


def char_display(char_code: int) -> str:
    char = chr(char_code)
    display = "(space)" if char == " " else char
    return f"{display} ({char_code})"


def scenario_table(title: str, results: Sequence[AnalysisResult], high: float = 10.0) -> Table:
    table = Table(title=title)
    table.add_column("Rotation", justify="right")
    table.add_column("Matches", justify="right")
    table.add_column("Total Bytes", justify="right")
    table.add_column("Match %", justify="right")

    for result in results:
        style = COLORS["high_match"] if result.match_percentage > high else None
        table.add_row(
            f"{result.rotation} bits",
            str(result.match_count),
            str(result.total_bytes),
            f"{result.percentage_display}%",
            style=style,
        )
    return table


def render_single(analysis: SingleAnalysis, high: float = 10.0) -> Group:
    """Render both scenario tables for a single analysis run."""
    return Group(
        scenario_table("Scenario 1: Rotated then XORed", analysis.scenario1, high),
        scenario_table("Scenario 2: XORed then Rotated", analysis.scenario2, high),
    )


def render_ranked(
    results: Sequence[AnalysisResult],
    limit: int = 50,
    high: float = 10.0,
    strong: float = 20.0,
) -> Table:
    """Render the top ranked configurations of an exhaustive run."""
    top_results = results[:limit]
    table = Table(title=f"Auto Mode Results (Top {len(top_results)} configurations)")
    table.add_column("#", justify="right")
    table.add_column("Scenario")
    table.add_column("Matrix")
    table.add_column("Mode")
    table.add_column("Rotation", justify="right")
    table.add_column("Match %", justify="right")
    table.add_column("Matches", justify="right")

    for rank, result in enumerate(top_results, start=1):
        style = percentage_style(result.match_percentage, high, strong)
        table.add_row(
            f"#{rank}",
            result.scenario.display_name,
            "No matrix" if result.matrix_config.is_none else str(result.matrix_config),
            str(result.matrix_mode),
            f"{result.rotation} bits",
            f"[{style}]{result.percentage_display}%[/{style}]",
            f"{result.match_count} / {result.total_bytes}",
        )
    return table


def bytes_text(result: AnalysisResult) -> Text:
    """Output bytes as 8-bit groups with the matching ones highlighted."""
    matched = result.matched_indices
    text = Text()
    for index, byte in enumerate(result.output):
        style = COLORS["highlight"] if index in matched else None
        text.append(f"{byte:08b}", style=style)
        if index < len(result.output) - 1:
            text.append(" ")
    return text


def candidates_table(result: AnalysisResult) -> Optional[Table]:
    matches = [m for m in result.matches if m.candidates]
    if not matches:
        return None

    table = Table(title="Possible plaintext characters")
    table.add_column("Index", justify="right")
    table.add_column("Byte")
    table.add_column("Candidates")
    for match in matches:
        table.add_row(
            str(match.index),
            f"0x{match.byte:02X} ({match.byte})",
            ", ".join(char_display(c) for c in match.candidates),
        )
    return table


def render_detail(result: AnalysisResult) -> Group:
    """Render one result's bytes and the candidate characters behind each match."""
    info = f"Match Count: {result.match_count} / {result.total_bytes} ({result.percentage_display}%)"
    parts = [
        Panel(bytes_text(result), title=result.describe(), subtitle=info),
    ]
    table = candidates_table(result)
    if table is not None:
        parts.append(table)
    return Group(*parts)
