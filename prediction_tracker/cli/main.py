from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from prediction_tracker.config.runtime import RuntimeSettings
from prediction_tracker.entities.instrument import Instrument
from prediction_tracker.services.history_store import export_csv, format_timestamp
from prediction_tracker.utils.formatting import format_pct, format_usd
from prediction_tracker.utils.logging_config import setup_logging
from prediction_tracker.workers.tracker_worker import Tracker, build_tracker, run


def _add_instrument_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--asset", help="Asset symbol, e.g. BTC/USD (default: DEFAULT_ASSET)")
    parser.add_argument("--horizon", help="Prediction horizon, e.g. '8h' (default: DEFAULT_HORIZON)")
    parser.add_argument("--topic", type=int, help="Select by inference topic id instead of asset/horizon")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="prediction-tracker", description="Prediction vs. spot price tracker")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("instruments", help="List tracked instruments")

    fetch_parser = subparsers.add_parser("fetch", help="Run one refresh cycle and print the result")
    _add_instrument_args(fetch_parser)

    history_parser = subparsers.add_parser("history", help="Print stored prediction history")
    _add_instrument_args(history_parser)
    history_parser.add_argument("--limit", type=int, default=20, help="Number of most recent samples (default: 20)")

    export_parser = subparsers.add_parser("export", help="Export stored prediction history as CSV")
    _add_instrument_args(export_parser)
    export_parser.add_argument("--output", help="Output file (default: predictions_topic_<id>.csv)")

    clear_parser = subparsers.add_parser("clear", help="Delete stored prediction history")
    _add_instrument_args(clear_parser)

    run_parser = subparsers.add_parser("run", help="Poll continuously until interrupted")
    _add_instrument_args(run_parser)
    run_parser.add_argument("--interval-ms", type=int, help="Refresh interval (default: REFRESH_INTERVAL_MS)")

    subparsers.add_parser("serve", help="Start the HTTP report worker")

    return parser


def resolve_instrument(tracker: Tracker, args: argparse.Namespace) -> Instrument:
    if getattr(args, "topic", None) is not None:
        instrument = tracker.catalog.find_by_topic(args.topic)
        if instrument is None:
            raise ValueError(f"unknown topic id {args.topic}")
        return instrument

    asset = args.asset or tracker.settings.default_asset
    horizon = args.horizon or tracker.settings.default_horizon
    instrument = tracker.catalog.resolve(asset, horizon)
    if instrument is None:
        known = ", ".join(tracker.catalog.horizons(asset)) or "none"
        raise ValueError(f"unknown instrument {asset} / {horizon} (horizons for {asset}: {known})")
    return instrument


def _cmd_instruments(tracker: Tracker, _: argparse.Namespace) -> int:
    for instrument in tracker.catalog:
        print(f"{instrument.topic_id:>4}  {instrument.asset:<9} {instrument.horizon:<6} {instrument.name}")
    return 0


def _cmd_fetch(tracker: Tracker, args: argparse.Namespace) -> int:
    instrument = resolve_instrument(tracker, args)
    tracker.engine.select(instrument)
    asyncio.run(tracker.scheduler.fetch_once())

    state = tracker.engine.state
    print(f"{instrument.name} (topic {instrument.topic_id})")
    print(f"  prediction : {format_usd(state.latest_prediction)}")
    print(f"  live price : {format_usd(state.live_price)}")
    print(f"  change     : {format_pct(state.change_pct)}")
    print(f"  samples    : {state.sample_count}")
    print(f"  status     : {state.status.kind} - {state.status.text}")
    return 0 if state.status.kind == "ok" else 1


def _cmd_history(tracker: Tracker, args: argparse.Namespace) -> int:
    instrument = resolve_instrument(tracker, args)
    samples = tracker.engine.history_store.load(instrument.topic_id)
    for sample in samples[-max(0, args.limit):] if args.limit else samples:
        print(f"{format_timestamp(sample)}  {format_usd(sample.v)}")
    print(f"{len(samples)} stored predictions for topic {instrument.topic_id}")
    return 0


def _cmd_export(tracker: Tracker, args: argparse.Namespace) -> int:
    instrument = resolve_instrument(tracker, args)
    samples = tracker.engine.history_store.load(instrument.topic_id)
    if not samples:
        print(f"No prediction history for topic {instrument.topic_id}", file=sys.stderr)
        return 1

    output = Path(args.output or f"predictions_topic_{instrument.topic_id}.csv")
    output.write_text(export_csv(samples), encoding="utf-8")
    print(f"Wrote {len(samples)} rows to {output}")
    return 0


def _cmd_clear(tracker: Tracker, args: argparse.Namespace) -> int:
    instrument = resolve_instrument(tracker, args)
    tracker.engine.history_store.clear(instrument.topic_id)
    print(f"Prediction history cleared for topic {instrument.topic_id}")
    return 0


def _cmd_run(tracker: Tracker, args: argparse.Namespace) -> int:
    instrument = resolve_instrument(tracker, args)
    if args.interval_ms is not None:
        tracker.scheduler.schedule.interval_ms = tracker.scheduler.schedule.clamp(args.interval_ms)
    tracker.scheduler.schedule.enabled = True

    asyncio.run(run(tracker, instrument))
    return 0


_COMMANDS = {
    "instruments": _cmd_instruments,
    "fetch": _cmd_fetch,
    "history": _cmd_history,
    "export": _cmd_export,
    "clear": _cmd_clear,
    "run": _cmd_run,
}


def main(argv: list[str] | None = None, *, tracker: Tracker | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    settings = RuntimeSettings.from_env()
    setup_logging((args.log_level or settings.log_level).upper())

    if args.command == "serve":
        from prediction_tracker.workers.report_worker import main as serve

        serve()
        return 0

    tracker = tracker or build_tracker(settings)
    try:
        return _COMMANDS[args.command](tracker, args)
    except ValueError as error:
        print(f"error: {error}", file=sys.stderr)
        return 2


def entrypoint() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    entrypoint()
