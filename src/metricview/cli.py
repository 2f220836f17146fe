#!/usr/bin/env python3
"""
metricview CLI tool

Command line interface for inspecting and exporting experiment metric CSV
files, and for starting the HTTP API server.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

import uvicorn

from metricview.config import get_data_dir, get_session_backend
from metricview.session import ExperimentSession


def load_session(path: str) -> ExperimentSession:
    """
    Ingest a CSV file into a new session, exiting with status 1 on failure

    Args:
        path: CSV file path

    Returns:
        Session holding the ingested experiments
    """
    session = ExperimentSession()
    outcome = asyncio.run(session.ingest(path))
    if not outcome.success:
        print(f"Error: {outcome.error}")
        sys.exit(1)
    return session


def run_summary(path: str) -> None:
    """
    Print experiments, metrics and data point counts of a CSV file

    Args:
        path: CSV file path
    """
    session = load_session(path)
    print(f"Experiments: {len(session.experiments)}")
    print(f"Data points: {session.total_data_points}")
    print(f"Metrics: {', '.join(session.all_metrics)}")
    for experiment_id in sorted(session.experiments):
        experiment = session.experiments[experiment_id]
        metrics = ", ".join(sorted(experiment.metrics))
        print(f"  {experiment_id}: {len(experiment.data)} points ({metrics})")


def run_export(path: str, experiment_ids: list[str], metrics: list[str], output_dir: str) -> None:
    """
    Export selected experiments and metrics of a CSV file

    Args:
        path: CSV file path
        experiment_ids: Experiments to export (all when empty)
        metrics: Metrics to export (all when empty)
        output_dir: Directory the export file is written to
    """
    session = load_session(path)

    if experiment_ids:
        unknown = [experiment_id for experiment_id in experiment_ids if experiment_id not in session.experiments]
        if unknown:
            print(f"Error: Unknown experiments: {', '.join(unknown)}")
            sys.exit(1)
        for experiment_id in dict.fromkeys(experiment_ids):
            session.toggle_experiment(experiment_id)
    else:
        session.select_all_experiments()

    for metric in dict.fromkeys(metrics):
        session.toggle_metric(metric)

    if not session.export_selected_data(output_dir):
        print("Error: No data matches the selection")
        sys.exit(1)
    print(f"Export written to {os.path.abspath(output_dir)}")


def run_serve(host: str = "127.0.0.1", port: int = 3143, data_dir: str | None = None, dev: bool = False) -> None:
    """
    Start the metricview API server

    Args:
        host: Host name
        port: Port number
        data_dir: Directory for saved sessions (file session backend)
        dev: Enable development mode with auto-reload
    """
    if data_dir is not None:
        os.environ["METRICVIEW_DATA_DIR"] = data_dir
        # Saved sessions only land in the data directory with the file backend
        os.environ.setdefault("METRICVIEW_SESSION_BACKEND", "file")

    print("Starting metricview API server...")
    print(f"Endpoint: http://{host}:{port}/api")
    backend = get_session_backend() or "memory (default)"
    print(f"Session backend: {backend}")
    if backend == "file":
        print(f"Data directory: {get_data_dir()}")
    if dev:
        print("Development mode: auto-reload enabled")

    uvicorn.run("metricview.server:create_app", factory=True, host=host, port=port, reload=dev)


def main(argv: list[str] | None = None) -> None:
    """
    CLI main entry point
    """
    parser = argparse.ArgumentParser(description="metricview experiment metrics tool")
    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    summary_parser = subparsers.add_parser("summary", help="Summarize an experiment metrics CSV file")
    summary_parser.add_argument("file", help="CSV file with experiment_id, metric_name, step, value columns")

    export_parser = subparsers.add_parser("export", help="Export selected experiments and metrics")
    export_parser.add_argument("file", help="CSV file with experiment_id, metric_name, step, value columns")
    export_parser.add_argument("-e", "--experiment", action="append", default=[], help="Experiment id to export (repeatable, default: all)")
    export_parser.add_argument("-m", "--metric", action="append", default=[], help="Metric name to export (repeatable, default: all)")
    export_parser.add_argument("--output-dir", default=".", help="Output directory (default: current directory)")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host name (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=3143, help="Port number (default: 3143)")
    serve_parser.add_argument("--data-dir", default=None, help="Session data directory; selects the file session backend unless METRICVIEW_SESSION_BACKEND is set (default: XDG-based ~/.local/share/metricview)")
    serve_parser.add_argument("--dev", action="store_true", help="Enable development mode with auto-reload")

    args = parser.parse_args(argv)

    if args.command == "summary":
        run_summary(args.file)
    elif args.command == "export":
        run_export(args.file, args.experiment, args.metric, args.output_dir)
    elif args.command == "serve":
        run_serve(host=args.host, port=args.port, data_dir=args.data_dir, dev=args.dev)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
