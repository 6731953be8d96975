"""CLI for the hrvmon heart-rate-variability engine."""

import asyncio
import logging

import click

from hrvmon.analytics.qt import QtcFormula
from hrvmon.config import DEFAULT_WINDOW_SIZE
from hrvmon.metrics import Metric

METRIC_CHOICES = [m.value for m in Metric]
FORMULA_CHOICES = [f.value for f in QtcFormula]
LOW_CONFIDENCE_MARK = "(low confidence)"


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)s] %(message)s",
        )


def _settings(window_size: int, qtc_formula: str):
    from hrvmon.config import Settings

    try:
        return Settings(window_size=window_size, qtc_formula=qtc_formula)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _selected(metrics: tuple[str, ...]) -> list[Metric]:
    return [Metric(m) for m in metrics] if metrics else list(Metric)


def _print_summary(store, selected: list[Metric]) -> None:
    from hrvmon.metrics import definition, format_value, metric_status
    from hrvmon.store import EntryStatus

    click.echo("\n--- Metric Summary ---")
    for metric in selected:
        defn = definition(metric)
        if store.status(metric) is EntryStatus.ABSENT:
            click.echo(f"  {defn.name:<12} --")
            continue
        entry = store.entry(metric)
        click.echo(
            f"  {defn.name:<12} {format_value(metric, entry.value):>12}  "
            f"mean={format_value(metric, entry.mean)}  sd={entry.stddev:.2f}  "
            f"[{metric_status(metric, entry.value)}]"
            + (f"  {LOW_CONFIDENCE_MARK}" if entry.low_confidence else "")
        )


window_option = click.option(
    "--window-size", "-w", default=DEFAULT_WINDOW_SIZE, type=int,
    help="Number of recent RR intervals per computation.",
)
formula_option = click.option(
    "--qtc-formula", type=click.Choice(FORMULA_CHOICES), default=QtcFormula.FRIDERICIA.value,
    help="Heart-rate correction used for QTc.",
)
metric_option = click.option(
    "--metric", "-m", "metrics", multiple=True, type=click.Choice(METRIC_CHOICES),
    help="Metric to compute (repeatable). Default: all.",
)
verbose_option = click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")


@click.group()
def main() -> None:
    """hrvmon -- real-time HRV metrics from a Polar H10 chest strap."""


@main.command()
@click.option("--timeout", "-t", default=10.0, help="Scan timeout in seconds.")
@verbose_option
def scan(timeout: float, verbose: bool) -> None:
    """Scan for nearby heart-rate straps."""
    from hrvmon.scanner import scan as do_scan

    _setup_logging(verbose)
    asyncio.run(do_scan(timeout))


@main.command()
@click.option("--address", "-a", default=None, help="BLE address to connect to.")
@click.option("--duration", "-d", default=None, type=float, help="Streaming duration in seconds.")
@click.option("--ecg/--no-ecg", default=None, help="Start the ECG stream (default: on when QTc is requested).")
@metric_option
@window_option
@formula_option
@verbose_option
def stream(
    address: str | None,
    duration: float | None,
    ecg: bool | None,
    metrics: tuple[str, ...],
    window_size: int,
    qtc_formula: str,
    verbose: bool,
) -> None:
    """Stream live HRV metrics from a Polar H10."""
    from hrvmon.ble import stream_device
    from hrvmon.device import SensorDevice
    from hrvmon.metrics import definition, format_value
    from hrvmon.registry import CalculatorRegistry

    _setup_logging(verbose)
    settings = _settings(window_size, qtc_formula)
    selected = _selected(metrics)
    if ecg is None:
        ecg = Metric.QTC in selected
    elif not ecg and Metric.QTC in selected:
        selected.remove(Metric.QTC)

    device = SensorDevice()
    registry = CalculatorRegistry(device, settings=settings)

    def _on_value(metric: Metric, value: float) -> None:
        calc = registry.calculator(metric)
        mark = f"  {LOW_CONFIDENCE_MARK}" if calc is not None and calc.low_confidence else ""
        click.echo(f"  {definition(metric).name:<12} {format_value(metric, value)}{mark}")

    for metric in selected:
        registry.subscribe(metric, lambda v, m=metric: _on_value(m, v))

    try:
        asyncio.run(stream_device(device, address, enable_ecg=ecg, duration=duration))
    except KeyboardInterrupt:
        click.echo("\nStopped.")
    finally:
        registry.close()

    _print_summary(registry.store, selected)


@main.command()
@click.option("--address", "-a", default=None, help="BLE address to connect to.")
@click.option("--duration", "-d", default=None, type=float, help="Capture duration in seconds.")
@click.option("--output", "-o", default=None, help="Output file path.")
@click.option("--ecg/--no-ecg", default=True, help="Capture the PMD ECG stream as well.")
@verbose_option
def capture(address: str | None, duration: float | None, output: str | None, ecg: bool, verbose: bool) -> None:
    """Capture raw HR/ECG notifications to a JSONL file."""
    from hrvmon.logger import capture as do_capture

    _setup_logging(verbose)
    try:
        asyncio.run(do_capture(address, duration, output, enable_ecg=ecg))
    except KeyboardInterrupt:
        click.echo("\nStopped.")


@main.command()
@click.argument("file", type=click.Path(exists=True))
@metric_option
@window_option
@formula_option
@click.option("--output", "-o", default=None, help="Write the final metric table as JSON.")
@verbose_option
def replay(
    file: str,
    metrics: tuple[str, ...],
    window_size: int,
    qtc_formula: str,
    output: str | None,
    verbose: bool,
) -> None:
    """Replay a captured log through the metric engine."""
    import json

    from hrvmon.replay import replay_metrics

    _setup_logging(verbose)
    settings = _settings(window_size, qtc_formula)
    selected = _selected(metrics)

    store, stats = replay_metrics(file, selected, settings)
    click.echo(
        f"Replayed {stats['total']} frames "
        f"({stats['routed']} routed, {stats['skipped']} skipped)."
    )
    _print_summary(store, selected)

    if output:
        table = {
            m.value: {
                "value": store.entry(m).value,
                "mean": store.entry(m).mean,
                "stddev": store.entry(m).stddev,
                "status": store.status(m).value,
                "low_confidence": store.entry(m).low_confidence,
            }
            for m in selected
        }
        with open(output, "w") as f:
            json.dump(table, f, indent=2)
        click.echo(f"Saved metric table to {output}")


@main.command("metrics")
def list_metrics() -> None:
    """List the supported metrics with units and normal ranges."""
    from hrvmon.metrics import METRIC_DEFINITIONS

    for metric, defn in METRIC_DEFINITIONS.items():
        rng = defn.normal_range
        unit = f" {defn.unit}" if defn.unit else ""
        click.echo(
            f"{metric.value:<11} {defn.name:<12} {defn.description} "
            f"(normal {rng.min:g}-{rng.max:g}{unit})"
        )


if __name__ == "__main__":
    main()
