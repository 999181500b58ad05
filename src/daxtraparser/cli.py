"""Typer CLI entrypoint for the DaXtra parser client."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from .competencies import extract_competencies, summarize_competencies
from .config import load_config
from .container import ParserContainer, create_container
from .core import dump_profile
from .errors import DaxtraError
from .logging import configure_logging
from .schemas.config import AppConfig

app = typer.Typer(help="DaXtra resume and job order parsing CLI.")

ConfigOption = typer.Option(
    None, exists=True, readable=True, dir_okay=False, help="YAML config path."
)
OutputOption = typer.Option(None, dir_okay=False, help="Write the result to this file.")
LogLevelOption = typer.Option("WARNING", help="Log level for structured logging.")


def _load(config: Optional[Path]) -> AppConfig:
    try:
        return load_config(config)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _container(config: Optional[Path], log_level: str) -> ParserContainer:
    configure_logging(log_level)
    return create_container(settings=_load(config))


def _emit(result: Any, output: Optional[Path]) -> None:
    rendered = result if isinstance(result, str) else json.dumps(result, ensure_ascii=False, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered, encoding="utf-8")
        typer.echo(f"Result saved to {output}.")
    else:
        typer.echo(rendered)


def _fail(exc: DaxtraError) -> NoReturn:
    typer.echo(json.dumps({"success": False, "error": exc.to_dict()}, ensure_ascii=False), err=True)
    raise typer.Exit(code=1)


@app.command("parse-resume")
def parse_resume(
    file: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Resume document."),
    two_phase: bool = typer.Option(False, "--two-phase", help="Parse personal details first, then the full profile."),
    config: Optional[Path] = ConfigOption,
    output: Optional[Path] = OutputOption,
    log_level: str = LogLevelOption,
) -> None:
    """Parse a resume into a candidate profile."""
    content = file.read_bytes()
    with _container(config, log_level).client() as client:
        try:
            if two_phase:
                result = client.parse_personal_then_full(content, file.name)
                full = result.full
                payload: dict[str, Any] = {
                    "parsing_method": "two-phase",
                    "personal": dump_profile(result.personal),
                    "full": dump_profile(full),
                }
            else:
                full = client.parse_full_resume(content, file.name)
                payload = {"parsing_method": "full", "profile": dump_profile(full)}
        except DaxtraError as exc:
            _fail(exc)
    competencies = extract_competencies(full)
    payload["competencies"] = [item.to_payload() for item in competencies]
    payload["summary"] = summarize_competencies(competencies)
    _emit(payload, output)


@app.command("parse-vacancy")
def parse_vacancy(
    file: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Job order document."),
    config: Optional[Path] = ConfigOption,
    output: Optional[Path] = OutputOption,
    log_level: str = LogLevelOption,
) -> None:
    """Parse a job order into a vacancy profile."""
    with _container(config, log_level).client() as client:
        try:
            profile = client.parse_job_order(file.read_bytes(), file.name)
        except DaxtraError as exc:
            _fail(exc)
    _emit({"parsing_method": "vacancy", "profile": dump_profile(profile)}, output)


@app.command("convert-html")
def convert_html(
    file: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Document to convert."),
    high_quality: bool = typer.Option(False, "--high-quality", help="Use the high quality converter."),
    config: Optional[Path] = ConfigOption,
    output: Optional[Path] = OutputOption,
    log_level: str = LogLevelOption,
) -> None:
    """Convert a document to HTML."""
    with _container(config, log_level).client() as client:
        try:
            html = client.convert_to_html(file.read_bytes(), high_quality, file.name)
        except DaxtraError as exc:
            _fail(exc)
    _emit(html, output)


@app.command()
def serve(
    config: Optional[Path] = ConfigOption,
    host: Optional[str] = typer.Option(None, help="Bind address."),
    port: Optional[int] = typer.Option(None, help="Bind port."),
    log_level: Optional[str] = typer.Option(None, help="Log level for structured logging."),
) -> None:
    """Run the HTTP proxy service."""
    app_config = _load(config)

    import uvicorn

    from .api import create_app

    service = app_config.service
    configure_logging(log_level or service.log_level)
    container = create_container(settings=app_config)
    uvicorn.run(
        create_app(container, service),
        host=host or service.host,
        port=port or service.port,
        log_level=(log_level or service.log_level).lower(),
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
