"""
Main CLI interface for Agri Assist.

This module provides the Typer-based command-line interface with commands for:
- Plant disease diagnosis and plant identification from photos
- Crop growing guides and market prices
- Community questions and the saved question board
- Streaming expert chat
- Voice input through audio clips and language selection
"""

import logging
import os
import sys
from typing import List, Optional

import pyperclip
import typer
from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from .core.config import ConfigError, ensure_project_env, load_project_env
from .core.orchestrator import PromptOrchestrator
from .core.progress import reporter
from .core.render import render_markdown, safe_text
from .core.settings import LanguageSettings
from .core.speech import SpeechCaptureSession, SpeechError
from .core.storage import KeyValueStore
from .core.strings import t
from .core.types import ChatMessage, DiagnosisResult, Language, MarketPriceReport, OrchestratorResult, PlantIdentificationResult
from .core.views import (
    BaseView,
    CommunityHubView,
    CropInfoView,
    DiagnoserView,
    ExpertChatView,
    IdentifierView,
    MarketPricesView,
)

app = typer.Typer(
    name="agri-assist",
    help="Agri Assist CLI - diagnose plant diseases, identify plants, check crop prices and ask farming experts",
    no_args_is_help=True,
)

console = Console()


def get_settings() -> LanguageSettings:
    return LanguageSettings(KeyValueStore())


def get_orchestrator() -> PromptOrchestrator:
    return PromptOrchestrator()


def get_speech_session(settings: LanguageSettings) -> SpeechCaptureSession:
    return SpeechCaptureSession(settings=settings)


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Write model requests and responses to the debug log directory"),
    data_dir: Optional[str] = typer.Option(None, "--data-dir", help="Directory for settings, saved posts and debug logs"),
):
    """Configure logging and the data directory before running a command."""
    if data_dir:
        os.environ["AA_DATA_DIR"] = data_dir
    if debug:
        os.environ["AA_DEBUG"] = "1"
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    load_project_env()


def _copy_to_clipboard(text: str) -> None:
    try:
        pyperclip.copy(text)
    except Exception as e:
        # clipboard is optional on headless hosts
        logging.getLogger(__name__).debug(f"Clipboard copy failed: {e}")


def _listen(view: BaseView, settings: LanguageSettings, audio_paths: List[str]) -> None:
    """Feed audio clips through a speech session and merge the transcript into the view."""
    session = get_speech_session(settings)
    if not session.supported:
        console.print(f"[yellow]{safe_text(t(settings.language, 'speech_unsupported'))}[/yellow]")
        return

    view.attach_speech(session)
    session.start()
    try:
        feed = session.engine.feed
        for path in audio_paths:
            reporter.step(f"Transcribing {os.path.basename(path)}…")
            feed(path)
            if not session.is_listening:
                break
    finally:
        session.stop()
        view.detach_speech()
        session.close()


def _fail(view: BaseView) -> None:
    console.print(f"[bold red]Error:[/bold red] {safe_text(view.error or '')}")
    sys.exit(1)


def _print_json(result: OrchestratorResult) -> None:
    console.print_json(result.model_dump_json(by_alias=True, exclude={"kind"}))


def _print_list(title: str, items: List[str]) -> None:
    console.print(f"\n[bold]{title}[/bold]")
    for item in items:
        console.print(f"  • {safe_text(item)}")


def _display_diagnosis(result: DiagnosisResult) -> None:
    console.print(
        Panel(
            f"[bold]{safe_text(result.disease_name)}[/bold]\n[dim]Confidence: {safe_text(result.confidence)}[/dim]\n\n{safe_text(result.description)}",
            title="Diagnosis",
            border_style="green",
        )
    )
    _print_list("Organic treatments", result.organic_treatments)
    _print_list("Chemical treatments", result.chemical_treatments)
    _print_list("Prevention tips", result.prevention_tips)


def _display_identification(result: PlantIdentificationResult) -> None:
    console.print(
        Panel(
            f"[bold]{safe_text(result.common_name)}[/bold] [italic]({safe_text(result.scientific_name)})[/italic]\n\n{safe_text(result.description)}",
            title="Plant",
            border_style="green",
        )
    )
    _print_list("Care tips", result.care_tips)


def _display_market_report(report: MarketPriceReport) -> None:
    if report.summary:
        console.print(render_markdown(report.summary))

    table = Table(title="Market Prices")
    table.add_column("Market", style="cyan")
    table.add_column("Price", style="bold white")
    table.add_column("Date", style="dim")
    table.add_column("Source", style="blue")
    for row in report.prices:
        source = safe_text(row.source.title or row.source.uri) if row.source else ""
        table.add_row(safe_text(row.market_name), safe_text(row.price), safe_text(row.date), source)
    console.print(table)


@app.command()
def diagnose(
    text: Optional[str] = typer.Option(None, "--text", "-t", help="Symptoms description"),
    image: Optional[str] = typer.Option(None, "--image", "-i", help="Path to a photo of the affected plant (max 4MB)"),
    voice: Optional[List[str]] = typer.Option(None, "--voice", "-v", help="Audio clip(s) describing the symptoms"),
    output_format: str = typer.Option("rich", "--format", "-f", help="Output format (rich, json)"),
):
    """
    Diagnose a plant disease from symptoms and/or a photo.

    Examples:
        agri-assist diagnose --text "yellow spots on tomato leaves"
        agri-assist diagnose --image leaf.jpg --voice symptoms.m4a
    """
    settings = get_settings()
    view = DiagnoserView(get_orchestrator(), settings)
    view.prompt = text or ""

    with reporter.initialize(console, "Preparing request…"):
        if image and not view.set_image(image):
            _fail(view)
        if voice:
            _listen(view, settings, voice)
        reporter.step("Diagnosing plant…")
        result = view.submit()
        reporter.complete_step()

    if result is None:
        _fail(view)

    if output_format == "json":
        _print_json(result)
        return
    _display_diagnosis(result)


@app.command()
def identify(
    image: Optional[str] = typer.Option(None, "--image", "-i", help="Path to a photo of the plant (max 4MB)"),
    text: Optional[str] = typer.Option(None, "--text", "-t", help="Optional extra context"),
    voice: Optional[List[str]] = typer.Option(None, "--voice", "-v", help="Audio clip(s) with extra context"),
    output_format: str = typer.Option("rich", "--format", "-f", help="Output format (rich, json)"),
):
    """
    Identify a plant from a photo.

    Examples:
        agri-assist identify --image plant.png
    """
    settings = get_settings()
    view = IdentifierView(get_orchestrator(), settings)
    view.prompt = text or ""

    with reporter.initialize(console, "Preparing request…"):
        if image and not view.set_image(image):
            _fail(view)
        if voice:
            _listen(view, settings, voice)
        reporter.step("Identifying plant…")
        result = view.submit()
        reporter.complete_step()

    if result is None:
        _fail(view)

    if output_format == "json":
        _print_json(result)
        return
    _display_identification(result)


@app.command("crop-info")
def crop_info(
    crop: Optional[str] = typer.Argument(None, help="Crop name"),
    voice: Optional[List[str]] = typer.Option(None, "--voice", "-v", help="Audio clip saying the crop name"),
):
    """
    Show a growing guide for a crop.

    Examples:
        agri-assist crop-info wheat
    """
    settings = get_settings()
    view = CropInfoView(get_orchestrator(), settings)
    view.crop_name = crop or ""

    with reporter.initialize(console, "Preparing request…"):
        if voice:
            _listen(view, settings, voice)
        reporter.step(f"Fetching information about {view.crop_name or 'crop'}…")
        result = view.submit()
        reporter.complete_step()

    if result is None:
        _fail(view)

    console.print(render_markdown(result.markdown))
    _copy_to_clipboard(result.markdown)


@app.command("market-prices")
def market_prices(
    crop: Optional[str] = typer.Argument(None, help="Crop name"),
    voice: Optional[List[str]] = typer.Option(None, "--voice", "-v", help="Audio clip saying the crop name"),
    output_format: str = typer.Option("rich", "--format", "-f", help="Output format (rich, json)"),
):
    """
    Show the latest market prices for a crop, with sources.

    Examples:
        agri-assist market-prices onion
    """
    settings = get_settings()
    view = MarketPricesView(get_orchestrator(), settings)
    view.crop_name = crop or ""

    with reporter.initialize(console, "Preparing request…"):
        if voice:
            _listen(view, settings, voice)
        reporter.step(f"Searching market prices for {view.crop_name or 'crop'}…")
        report = view.submit()
        reporter.complete_step()

    if report is None:
        if view.summary:
            console.print(render_markdown(view.summary))
        _fail(view)

    if output_format == "json":
        _print_json(report)
        return
    _display_market_report(report)


@app.command()
def ask(
    question: Optional[str] = typer.Argument(None, help="Your question for the community"),
):
    """
    Ask the community a farming question. The answer is saved on the board.

    Examples:
        agri-assist ask "When should I sow mustard?"
    """
    settings = get_settings()
    view = CommunityHubView(get_orchestrator(), settings)
    view.question = question or ""

    with reporter.initialize(console, "Asking the community expert…"):
        post = view.submit()
        reporter.complete_step()

    if post is None:
        _fail(view)

    console.print(Panel(safe_text(post.answer), title=safe_text(post.question), subtitle=post.timestamp, border_style="green"))
    _copy_to_clipboard(post.answer)


@app.command()
def posts(
    limit: int = typer.Option(10, "--max", "-m", help="Maximum posts to show"),
):
    """List saved community questions, newest first."""
    settings = get_settings()
    view = CommunityHubView(get_orchestrator(), settings)

    if not view.posts:
        console.print("[yellow]No community posts yet[/yellow]")
        return

    for post in view.posts[:limit]:
        console.print(Panel(safe_text(post.answer), title=safe_text(post.question), subtitle=post.timestamp, border_style="dim"))

    if len(view.posts) > limit:
        console.print(f"[dim]... and {len(view.posts) - limit} more posts[/dim]")


@app.command()
def chat():
    """
    Chat with the farming expert. Type /voice <audio> to speak, /exit to quit.
    """
    settings = get_settings()
    view = ExpertChatView(get_orchestrator(), settings)
    console.print(f"[bold green]AgriBot:[/bold green] {safe_text(view.messages[0].text)}")

    while True:
        try:
            line = Prompt.ask("[bold blue]You[/bold blue]", console=console)
        except (EOFError, KeyboardInterrupt):
            break

        if line.strip() in ("/exit", "/quit"):
            break
        if line.startswith("/voice "):
            _listen(view, settings, line[len("/voice ") :].split())
            console.print(f"[dim]Heard: {safe_text(view.input)}[/dim]")
            line = view.input
        view.input = line

        with Live(console=console, refresh_per_second=12) as live:

            def update(message: ChatMessage) -> None:
                live.update(render_markdown(message.text))

            view.send(on_update=update)

    view.close()


@app.command()
def listen(
    audio: List[str] = typer.Argument(..., help="Audio clip(s) to transcribe"),
):
    """
    Transcribe audio clips in the current language.

    Examples:
        agri-assist listen question.m4a
    """
    settings = get_settings()
    session = get_speech_session(settings)
    if not session.supported:
        console.print(f"[bold red]Error:[/bold red] {safe_text(t(settings.language, 'speech_unsupported'))}")
        sys.exit(1)

    errors: List[str] = []
    session.start()
    try:
        feed = session.engine.feed
        for path in audio:
            try:
                feed(path)
            except SpeechError as e:
                errors.append(str(e))
            if not session.is_listening:
                errors.append(f"Recognition stopped while processing {path}")
                break
    finally:
        session.close()

    if errors:
        for message in errors:
            console.print(f"[bold red]Error:[/bold red] {safe_text(message)}")
    if not session.transcript:
        sys.exit(1)
    console.print(Panel(safe_text(session.transcript), title=f"Transcript ({settings.language.value})"))


@app.command()
def language(
    code: Optional[str] = typer.Argument(None, help="Locale code to switch to (en-US, es-ES, hi-IN, kn-IN)"),
):
    """Show or change the response language."""
    settings = get_settings()
    if code is None:
        console.print(f"Current language: [bold]{settings.language.value}[/bold]")
        console.print(f"[dim]Available: {', '.join(lang.value for lang in Language)}[/dim]")
        return

    try:
        settings.set_language(Language(code))
    except ValueError:
        console.print(f"[bold red]Error:[/bold red] Unsupported language: {safe_text(code)}")
        sys.exit(1)
    console.print(f"[green]Language set to {settings.language.value}[/green]")


@app.command()
def init(
    source_env: Optional[str] = typer.Option(None, "--env", help="Existing .env file to copy"),
    overwrite: bool = typer.Option(False, "--overwrite/--no-overwrite", help="Replace an existing project env file"),
):
    """Create the project-scoped .env file under the data directory."""
    try:
        path = ensure_project_env(source_env=source_env, overwrite=overwrite)
    except (ConfigError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)
    console.print(f"[green]Project env ready at {path}[/green]")


if __name__ == "__main__":
    app()
