from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from agent.cycle import DetectionCycle
from agent.scheduler import CycleScheduler
from alerts.classifier import build_alert
from alerts.notifier import BaseNotifier, CollectingNotifier, ConsoleNotifier, LogNotifier
from config.settings import AppSettings, settings
from config.timeframes import Timeframe
from data.data_manager import DataManager
from learning.confidence import ConfidenceEstimator
from utils.errors import DoubleBottomError

app = typer.Typer(help="Double Bottom Agent - scan crypto markets for double bottom patterns")
console = Console()


def _settings(pairing: str | None, source: str | None) -> AppSettings:
    overrides = {}
    if pairing is not None:
        overrides["pairing_policy"] = pairing
    if source is not None:
        overrides["price_source"] = source
    if not overrides:
        return settings
    return AppSettings(**{**settings.model_dump(), **overrides})


def _notifier(name: str, tf: Timeframe) -> BaseNotifier:
    if name == "console":
        return ConsoleNotifier(console, tf)
    if name == "log":
        return LogNotifier(tf)
    raise typer.BadParameter(f"Unknown notifier: {name} (expected console or log)")


def _estimator(cfg: AppSettings, outcomes: str | None) -> ConfidenceEstimator:
    estimator = ConfidenceEstimator(similarity_window=cfg.similarity_window)
    path = outcomes or cfg.outcomes_file
    if path:
        estimator.load_outcomes(path)
    return estimator


def _display_alerts(alerts) -> None:
    table = Table(title="Double Bottom Alerts")
    table.add_column("Symbol", style="cyan")
    table.add_column("Tier", style="bold")
    table.add_column("Price", style="white")
    table.add_column("Neckline", style="green")
    table.add_column("Stop Loss", style="red")
    table.add_column("Upside %", style="yellow")
    table.add_column("Confidence %", style="blue")
    for a in alerts:
        table.add_row(
            a.asset.display_symbol,
            f"{a.tier.marker} {a.tier.name}",
            f"{a.asset.current_price:.4f}",
            f"{a.pattern.neckline:.4f}",
            f"{a.stop_loss:.4f}",
            f"{a.target_gain * 100:.2f}",
            f"{a.confidence * 100:.1f}",
        )
    console.print(table)


@app.command()
def run(
    outcomes: str = typer.Option(None, help="CSV of past outcomes (depth,outcome)"),
    pairing: str = typer.Option(None, help="Pairing policy: most_recent or best_match"),
    source: str = typer.Option(None, help="Price source: coingecko or yahoo"),
    notifier: str = typer.Option("console", help="Alert output: console (rich panels) or log"),
):
    """Run a cycle now, then every configured period until interrupted."""
    cfg = _settings(pairing, source)
    cycle = DetectionCycle(DataManager(cfg), _notifier(notifier, cfg.timeframe), _estimator(cfg, outcomes), cfg)
    scheduler = CycleScheduler(cycle, cfg.cycle_interval_seconds)
    console.print(f"[bold]Scanning every {cfg.cycle_interval_minutes:g} minutes. Ctrl+C to stop.[/bold]")
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped.[/yellow]")


@app.command()
def scan(
    outcomes: str = typer.Option(None, help="CSV of past outcomes (depth,outcome)"),
    pairing: str = typer.Option(None, help="Pairing policy: most_recent or best_match"),
    source: str = typer.Option(None, help="Price source: coingecko or yahoo"),
):
    """Run a single detection cycle and print the alerts."""
    cfg = _settings(pairing, source)
    notifier = CollectingNotifier()
    cycle = DetectionCycle(DataManager(cfg), notifier, _estimator(cfg, outcomes), cfg)
    try:
        report = cycle.run()
    except DoubleBottomError as e:
        console.print(f"[red]Cycle aborted: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"Scanned {report.assets_scanned} assets.")
    if not report.alerts:
        console.print("[yellow]No double bottoms found.[/yellow]")
        return
    _display_alerts(report.alerts)


@app.command()
def analyze(
    coin: str = typer.Option(..., help="CoinGecko coin id (e.g., bitcoin)"),
    outcomes: str = typer.Option(None, help="CSV of past outcomes (depth,outcome)"),
    pairing: str = typer.Option(None, help="Pairing policy: most_recent or best_match"),
    source: str = typer.Option(None, help="Price source: coingecko or yahoo"),
):
    """Run the detection pipeline for one coin and show every step."""
    cfg = _settings(pairing, source)
    feed = DataManager(cfg)
    try:
        asset = next((a for a in feed.coingecko.list_markets() if a.id == coin), None)
        if asset is None:
            console.print(f"[red]Coin not found in markets listing: {coin}[/red]")
            raise typer.Exit(1)
        cycle = DetectionCycle(feed, CollectingNotifier(), _estimator(cfg, outcomes), cfg)
        analysis = cycle.analyze(asset)
    except DoubleBottomError as e:
        console.print(f"[red]Analysis failed: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Bottoms: {asset.display_symbol}")
    table.add_column("Index", style="cyan")
    table.add_column("Timestamp", style="white")
    table.add_column("Price", style="green")
    for b in analysis.bottoms:
        table.add_row(str(b.index), f"{b.timestamp:%Y-%m-%d %H:%M}", f"{b.price:.4f}")
    console.print(table)

    if not analysis.has_double_bottom:
        console.print("[yellow]No double bottom.[/yellow]")
        return

    alert = build_alert(asset, analysis.pattern, cycle.estimator.predict(analysis.pattern))
    _display_alerts([alert])


@app.command(name="config")
def config_cmd():
    """Show effective settings."""
    table = Table(title="Settings")
    table.add_column("Name", style="cyan")
    table.add_column("Value", style="green")
    for name, value in settings.model_dump().items():
        if name == "coingecko_api_key" and value:
            value = "****"
        table.add_row(name, str(value))
    console.print(table)


if __name__ == "__main__":
    app()
