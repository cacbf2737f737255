from __future__ import annotations

from typing import Mapping, Optional

from rich import box
from rich.markup import escape
from rich.table import Table

from .config import SiteConfig
from .state import SiteRuntimeState, SiteStatus

STATUS_STYLE = {
    SiteStatus.HEALTHY: "green",
    SiteStatus.DEGRADING: "yellow",
    SiteStatus.ALERTING: "bold red",
}


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        return f"{seconds / 60:.1f}m"
    elif seconds < 86400:
        return f"{seconds / 3600:.1f}h"
    else:
        return f"{seconds / 86400:.1f}d"


def build_table(
    sites: Mapping[str, SiteConfig],
    states: Mapping[str, SiteRuntimeState],
    fatal: Optional[Mapping[str, BaseException]] = None,
    caption: str = "",
) -> Table:
    table = Table(
        title="Uptime Monitor",
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=True,
        caption_style="bold",
    )
    table.add_column("Host", style="bold")
    table.add_column("Port")
    table.add_column("Status")
    table.add_column("RTT (ms)")
    table.add_column("Consec Fail")
    table.add_column("Threshold")
    table.add_column("Success")
    table.add_column("Fail")
    table.add_column("Last Error")

    fatal = fatal or {}
    for name, site in sites.items():
        st = states[name]
        if name in fatal:
            status_text = "[bold magenta]STOPPED[/]"
            last_error = escape(f"{type(fatal[name]).__name__}: {fatal[name]}")
        else:
            status = st.status
            status_text = f"[{STATUS_STYLE[status]}]{status.value.upper()}[/]"
            last_error = st.last_error.description if st.last_error else "-"
        rtt_display = f"{st.last_rtt_ms:.1f}" if st.last_rtt_ms is not None else "-"
        table.add_row(
            name,
            str(site.port),
            status_text,
            rtt_display,
            str(st.consecutive_failures),
            str(site.threshold),
            str(st.success_count),
            str(st.failure_count),
            last_error,
        )

    if caption:
        table.caption = caption
    return table
