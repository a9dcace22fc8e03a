from datetime import datetime, timezone

from apr_metrics.reporting.templates import REPORT_MD_TEMPLATE


def render_markdown_report(
    *,
    result: dict,
    artifact_path: str,
    version_metrics: str,
    version_logging: str,
    file_name: str = "STREAM_LOG",
) -> str:
    """Render a `compute_audit` result into the markdown audit report."""
    score = result.get("score", {})
    summary = result.get("horizon_summary", {})
    counts = summary.get("counts", {})
    params = result.get("params", {})
    warnings = result.get("warnings", [])

    md = REPORT_MD_TEMPLATE

    def repl(key, value):
        nonlocal md
        md = md.replace(key, str(value))

    repl("{{ file_name }}", file_name or "STREAM_LOG")
    repl("{{ status }}", "archived (locked)" if score.get("locked") else "live estimate")
    repl("{{ audit_id }}", score.get("audit_id") or "pending submission")
    repl("{{ horizon }}", summary.get("horizon", "n/a"))
    repl("{{ intervals }}", summary.get("intervals", 0))
    repl("{{ windows }}", summary.get("windows", 0))

    for k, v in counts.items():
        repl(f"{{{{ counts.{k} }}}}", v)
    for k, v in params.items():
        repl(f"{{{{ params.{k} }}}}", v)
    for k, v in score.items():
        repl(f"{{{{ score.{k} }}}}", v)

    repl("{{ mode }}", result.get("mode", "n/a"))
    repl("{{ tags }}", ", ".join(score.get("tags", [])) or "n/a")
    repl("{{ warnings }}", "\n".join(f"- {w}" for w in warnings) if warnings else "- None")

    repl("{{ artifact_path }}", artifact_path)
    repl("{{ version_metrics }}", version_metrics)
    repl("{{ version_logging }}", version_logging)
    repl("{{ generated_at }}", datetime.now(timezone.utc).isoformat())

    return md
