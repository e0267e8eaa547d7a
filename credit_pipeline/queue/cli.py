"""CLI harness for the analysis queue: init-db, submit, work, inspect, stats."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path

from credit_pipeline.db.config import DBConfig
from credit_pipeline.db.migrate import upgrade_to_head
from credit_pipeline.db.repositories.analysis_repo import AnalysisRepo
from credit_pipeline.db.session import init_db, session_scope
from credit_pipeline.queue.factory import build_pipeline
from credit_pipeline.queue.settings import QueueSettings
from credit_pipeline.queue.store import SqlJobStore
from credit_pipeline.queue.submit import submit_analysis_sync

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _cmd_init_db(args: argparse.Namespace) -> int:
    cfg = DBConfig()
    upgrade_to_head(cfg)
    print(f"Database ready: {cfg.db_url}")
    return 0


def _cmd_submit(args: argparse.Namespace) -> int:
    path = Path(args.file).resolve()
    if not path.exists():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1
    text = path.read_text(encoding="utf-8")
    init_db()
    store = SqlJobStore()
    max_attempts = args.max_attempts or QueueSettings().default_max_attempts
    analysis_id, job_id = submit_analysis_sync(
        store,
        args.owner,
        text,
        priority=args.priority,
        max_attempts=max_attempts,
        manual=args.manual,
    )
    print(f"analysis_id={analysis_id}")
    print(f"job_id={job_id}")
    print(f"\nInspect: python -m credit_pipeline.queue.cli inspect --job {job_id}")
    return 0


def _cmd_work(args: argparse.Namespace) -> int:
    init_db()
    pipeline = build_pipeline()

    async def run() -> None:
        if args.once:
            finished = await pipeline.pool.drain()
            for job_id, status in finished.items():
                print(f"{job_id} {status.value}")
            return
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop.set)
            except NotImplementedError:
                pass
        await pipeline.pool.run(stop)

    try:
        asyncio.run(run())
        return 0
    except KeyboardInterrupt:
        return 130


def _cmd_inspect(args: argparse.Namespace) -> int:
    init_db()
    store = SqlJobStore()
    job = store.get_sync(args.job)
    if job is None:
        print(f"Error: job not found: {args.job}", file=sys.stderr)
        return 1
    print(f"Job: {job.id}")
    print(f"  subject_id={job.subject_id}")
    print(f"  owner_id={job.owner_id}")
    print(f"  status={job.status.value}")
    print(f"  priority={job.priority}")
    print(f"  attempts={job.attempts}/{job.max_attempts}")
    print(f"  created_at={job.created_at}")
    print(f"  started_at={job.started_at}")
    print(f"  completed_at={job.completed_at}")
    if job.last_error:
        print(f"  error={job.last_error}")
    with session_scope() as s:
        analysis = AnalysisRepo().get(s, job.subject_id)
        if analysis is not None and analysis.result_json and args.result:
            print("\nResult:")
            print(json.dumps(json.loads(analysis.result_json), indent=2, ensure_ascii=False))
    return 0


def _cmd_stats(args: argparse.Namespace) -> int:
    init_db()
    counts = SqlJobStore().count_by_status_sync()
    for status, n in counts.items():
        print(f"  {status.value}: {n}")
    print(f"  total: {sum(counts.values())}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Credit report analysis queue")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init-db", help="Apply database migrations")
    p_init.set_defaults(func=_cmd_init_db)

    p_submit = sub.add_parser("submit", help="Store report text and enqueue an analysis job")
    p_submit.add_argument("--owner", "-o", required=True, help="Owner (user) ID")
    p_submit.add_argument("--file", "-f", required=True, help="Path to extracted report text")
    p_submit.add_argument("--priority", "-p", type=int, default=0, help="Higher runs first (default: 0)")
    p_submit.add_argument("--max-attempts", type=int, default=None, help="Attempt budget (default: QUEUE_DEFAULT_MAX_ATTEMPTS)")
    p_submit.add_argument("--manual", action="store_true", help="Store text as manually entered instead of OCR")
    p_submit.set_defaults(func=_cmd_submit)

    p_work = sub.add_parser("work", help="Run the worker pool")
    p_work.add_argument("--once", action="store_true", help="Drain the queue and exit")
    p_work.set_defaults(func=_cmd_work)

    p_inspect = sub.add_parser("inspect", help="Show a job's state")
    p_inspect.add_argument("--job", "-j", required=True, help="Job ID")
    p_inspect.add_argument("--result", "-r", action="store_true", help="Print the stored result JSON")
    p_inspect.set_defaults(func=_cmd_inspect)

    p_stats = sub.add_parser("stats", help="Job counts by status")
    p_stats.set_defaults(func=_cmd_stats)

    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
