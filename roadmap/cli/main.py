"""CLI interface for the Business Roadmap Generator."""
import json
import logging
from pathlib import Path
from typing import Optional

import typer

from core.providers.audit import AuditLogger, AuditRecord
from core.providers.registry import get_model_catalog

from ..agents.orchestrator import AgentStep
from ..app.version import version_label
from ..config.settings import build_config
from ..render.formatter import markdown_to_html
from ..session.state import RoadmapSession

app = typer.Typer(help="Business Roadmap Generator - seven-section business plans from a one-line idea")

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

RESEARCH_MODES = ("fast", "deep")


def _version_callback(value: bool):
    if value:
        typer.echo(version_label())
        raise typer.Exit()


@app.callback()
def cli(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit",
    ),
):
    """Business Roadmap Generator."""


def _print_step(step: AgentStep):
    if step.status == "running":
        typer.echo(f"[{step.index + 1}/{step.total}] {step.label}...", err=True)
    elif step.status == "success":
        typer.echo(f"  → {step.summary} ({step.elapsed_seconds:.1f}s)", err=True)
    else:
        typer.echo(f"  ✗ {step.error_message or step.summary}", err=True)


def _append_audit_record(path: Path):
    """Return a persist hook that appends each audit record to ``path`` as a JSON line."""
    def _persist(record: AuditRecord) -> None:
        with path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record.to_dict()) + "\n")
    return _persist


@app.command()
def generate(
    idea: str = typer.Argument(..., help="One-line business idea"),
    mode: str = typer.Option("deep", "--mode", help="Research mode (fast/deep)"),
    demo: Optional[bool] = typer.Option(
        None, "--demo/--live", help="Force placeholder content or live API calls",
    ),
    out: Optional[Path] = typer.Option(None, "--out", help="Write the text export here instead of stdout"),
    html_out: Optional[Path] = typer.Option(None, "--html", help="Also write a standalone HTML page"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to config YAML/JSON"),
    delay: Optional[float] = typer.Option(None, "--delay", help="Seconds to wait between API calls"),
    audit_log: Optional[Path] = typer.Option(None, "--audit-log", help="Append one JSON line per API call here"),
):
    """Generate a full roadmap for IDEA."""
    mode = mode.lower()
    if mode not in RESEARCH_MODES:
        raise typer.BadParameter(f"mode must be one of {', '.join(RESEARCH_MODES)}", param_hint="--mode")

    cfg = build_config(config, research_mode=mode, mock_mode=demo, step_delay_seconds=delay)
    audit = AuditLogger(persist_fn=_append_audit_record(audit_log) if audit_log else None)
    session = RoadmapSession(cfg, persist_preferences=False, audit=audit)
    session.idea = idea

    if not idea.strip():
        typer.echo("Error: business idea is empty", err=True)
        raise typer.Exit(code=1)

    label = "demo" if cfg.mock_mode else f"{cfg.provider}/{cfg.model}"
    typer.echo(f"Generating roadmap ({mode} mode, {label})", err=True)
    result = session.generate(on_step=_print_step)

    for warning in result.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    if result.placeholder_steps and not cfg.mock_mode:
        typer.echo(
            f"Note: placeholder content used for {', '.join(result.placeholder_steps)}",
            err=True,
        )

    text = session.export_text()
    if out is not None:
        out.write_text(text, encoding="utf-8")
        typer.echo(f"✓ Roadmap saved to {out}", err=True)
    else:
        typer.echo(text)

    if html_out is not None:
        html_out.write_text(session.export_html(), encoding="utf-8")
        typer.echo(f"✓ HTML saved to {html_out}", err=True)

    summary = session.writer.audit.summary()
    logger.info(
        "Audit: %d calls, %d+%d tokens, %d fallbacks",
        summary["total_calls"],
        summary["total_input_tokens"],
        summary["total_output_tokens"],
        summary["fallbacks"],
    )

    if result.error:
        raise typer.Exit(code=1)


@app.command()
def render(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Markdown file to convert"),
):
    """Convert a markdown file with the section formatter and print the HTML."""
    typer.echo(markdown_to_html(input_file.read_text(encoding="utf-8")))


@app.command()
def models():
    """List supported providers and models."""
    for entry in get_model_catalog():
        search = " [web search]" if entry["web_search"] else ""
        typer.echo(f"{entry['provider']:<10} {entry['model_id']:<32} {entry['label']}{search}")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
