"""Report builder with Jinja2 template support.

Renders the finalized failed/accepted buckets as a rich table, a plain
IP list or JSON.
"""

import io
import json
from typing import Any, Dict, List, Sequence, Tuple

from jinja2 import Environment, PackageLoader, select_autoescape
from rich import box
from rich.console import Console
from rich.table import Table

from ssh_stat.models import LoginEvent, OutputFormat

# Column header and cell style, in LoginEvent.row() order
TABLE_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("Date", "blue"),
    ("Ip", "red"),
    ("Attempts", "green"),
    ("User", "yellow"),
    ("Auth", "white"),
    ("Protocol", "cyan"),
    ("Port", ""),
    ("Server", ""),
)

# Wide enough that rows are never wrapped
CONSOLE_WIDTH = 512


def build_table(rows: Sequence[Sequence[str]]) -> Table:
    """Build the login table with one styled column per TABLE_COLUMNS entry."""
    table = Table(box=box.ASCII, header_style="bold")
    for header, style in TABLE_COLUMNS:
        table.add_column(header.upper(), style=style, no_wrap=True)
    for row in rows:
        table.add_row(*row)
    return table


def format_table(rows: Sequence[Sequence[str]], colors: bool = False) -> str:
    """Render rows as a boxed text table.

    Args:
        rows: Cells in TABLE_COLUMNS order, e.g. from LoginEvent.row()
        colors: Emit ANSI styles for the columns

    Returns:
        Table text without a trailing newline
    """
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=CONSOLE_WIDTH,
        force_terminal=colors,
        color_system="standard" if colors else None,
        markup=False,
        emoji=False,
        highlight=False,
    )
    console.print(build_table(rows))
    return buffer.getvalue().rstrip("\n")


class ReportBuilder:
    """Builder for table, IP list and JSON views of the result buckets.

    Attributes:
        env: Jinja2 Environment configured with PackageLoader
        show_accepted: Include the accepted bucket
        show_failed: Include the failed bucket
        colors: Style table columns with ANSI colors
    """

    def __init__(
        self,
        show_accepted: bool = True,
        show_failed: bool = True,
        colors: bool = False,
    ) -> None:
        """Initialize ReportBuilder with Jinja2 environment.

        Args:
            show_accepted: Include accepted logins in the output.
            show_failed: Include failed logins in the output.
            colors: Color the table columns (table view only).
        """
        self.show_accepted = show_accepted
        self.show_failed = show_failed
        self.colors = colors

        self.env = Environment(
            loader=PackageLoader("ssh_stat.reports", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def _build_context(
        self,
        failed: List[LoginEvent],
        accepted: List[LoginEvent],
    ) -> Dict[str, Any]:
        """Build template context for the table view."""
        return {
            "show_accepted": self.show_accepted,
            "show_failed": self.show_failed,
            "accepted_table": format_table([e.row() for e in accepted], colors=self.colors),
            "failed_table": format_table([e.row() for e in failed], colors=self.colors),
            "counts": {
                "accepted": len(accepted),
                "failed": len(failed),
            },
        }

    def render_table(self, failed: List[LoginEvent], accepted: List[LoginEvent]) -> str:
        """Render both buckets as boxed tables."""
        template = self.env.get_template("report.txt")
        return template.render(**self._build_context(failed, accepted))

    def render_ips(self, failed: List[LoginEvent], accepted: List[LoginEvent]) -> str:
        """Render the IP addresses, one per line.

        When both buckets are shown each list gets a heading; otherwise the
        bare list is returned so it can be piped into other tools.
        """
        accepted_ips = "\n".join(e.ip for e in accepted)
        failed_ips = "\n".join(e.ip for e in failed)

        if self.show_accepted and self.show_failed:
            return f"Accepted:\n\n{accepted_ips}\n\nFailed:\n\n{failed_ips}\n"
        if self.show_accepted:
            return f"{accepted_ips}\n" if accepted_ips else ""
        return f"{failed_ips}\n" if failed_ips else ""

    def render_json(self, failed: List[LoginEvent], accepted: List[LoginEvent]) -> str:
        """Render the buckets as a JSON document."""
        document: Dict[str, Any] = {}
        if self.show_accepted:
            document["accepted"] = [e.model_dump(mode="json") for e in accepted]
        if self.show_failed:
            document["failed"] = [e.model_dump(mode="json") for e in failed]
        return json.dumps(document, indent=2) + "\n"

    def render(
        self,
        output_format: OutputFormat,
        failed: List[LoginEvent],
        accepted: List[LoginEvent],
    ) -> str:
        """Render the buckets in the requested view."""
        if output_format == OutputFormat.IPS:
            return self.render_ips(failed, accepted)
        if output_format == OutputFormat.JSON:
            return self.render_json(failed, accepted)
        return self.render_table(failed, accepted)
