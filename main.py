# Filename: main.py

import argparse
import logging
import sys
import time

from agent import MarketAgent, REPORT_TYPES
from config import load_config
from dca import DCAParams, FREQUENCY_CYCLES_PER_MONTH, format_dca_analysis
from reports import format_alerts
from scheduler import Scheduler, default_jobs
from telegram_alert import build_notifier

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("Main")


def cmd_snapshot(agent: MarketAgent, args) -> int:
    report = agent.generate_report("snapshot", fmt=args.format)
    print("\n" + report.content)
    return 0


def cmd_alerts(agent: MarketAgent, args) -> int:
    alerts = agent.check_alerts()
    print("\n" + format_alerts(alerts))
    if alerts:
        logger.warning(f"Found {len(alerts)} active alerts")
        notifier = build_notifier(agent.config)
        if notifier:
            notifier.send_alerts(alerts)
    else:
        logger.info("No alerts triggered")
    return 0


def cmd_report(agent: MarketAgent, args) -> int:
    logger.info(f"Generating {args.type} report...")
    if args.no_save:
        print("\n" + agent.generate_report(args.type).content)
        return 0
    for path in agent.generate_and_save_report(args.type, path=args.output):
        logger.info(f"Report saved to: {path}")
    return 0


def cmd_dca(agent: MarketAgent, args) -> int:
    params = DCAParams(
        sell_token=args.sell_token,
        buy_token=args.buy_token,
        total_amount=args.amount,
        frequency=args.frequency,
        duration=args.cycles,
    )
    analysis = agent.analyze_dca(params)
    print("\n" + format_dca_analysis(analysis))
    return 0


def cmd_dreams(agent: MarketAgent, args) -> int:
    print("\n" + agent.generate_report("dreams", fmt=args.format).content)
    return 0


def cmd_scheduler(agent: MarketAgent, args) -> int:
    logger.info("🚀 Starting StarkWatch scheduler...")
    scheduler = Scheduler()
    jobs = default_jobs(agent, agent.config, build_notifier(agent.config))
    for job in jobs:
        scheduler.schedule_job(job)

    print("\n📅 Scheduled Jobs:")
    for job in jobs:
        print(f"  - {job.name}: {job.expression}")
    print("\nPress Ctrl+C to stop.\n")

    scheduler.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("❌ Scheduler stopped by user.")
    finally:
        scheduler.stop()
    return 0


def cmd_run_job(agent: MarketAgent, args) -> int:
    scheduler = Scheduler()
    for job in default_jobs(agent, agent.config, build_notifier(agent.config)):
        scheduler.schedule_job(job)
    scheduler.run_job_now(args.name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="starkwatch", description="Starknet market intelligence and reporting")
    parser.add_argument("--config", default="config.json", help="Path to config.json")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("snapshot", help="Print the current market snapshot")
    p.add_argument("--format", choices=["markdown", "json"], default=None)
    p.set_defaults(func=cmd_snapshot)

    p = sub.add_parser("alerts", help="Check price / volume / new token alerts")
    p.set_defaults(func=cmd_alerts)

    p = sub.add_parser("report", help="Generate and save a report")
    p.add_argument("type", nargs="?", choices=REPORT_TYPES, default="daily")
    p.add_argument("--output", default=None, help="Destination file")
    p.add_argument("--no-save", action="store_true", help="Print instead of writing to disk")
    p.set_defaults(func=cmd_report)

    p = sub.add_parser("dca", help="Analyze a DCA strategy")
    p.add_argument("sell_token")
    p.add_argument("buy_token")
    p.add_argument("amount", type=float)
    p.add_argument("frequency", choices=list(FREQUENCY_CYCLES_PER_MONTH))
    p.add_argument("--cycles", type=int, default=None)
    p.set_defaults(func=cmd_dca)

    p = sub.add_parser("dreams", help="$DREAMS cross-chain stats")
    p.add_argument("--format", choices=["markdown", "json"], default=None)
    p.set_defaults(func=cmd_dreams)

    p = sub.add_parser("scheduler", help="Run all scheduled jobs")
    p.set_defaults(func=cmd_scheduler)

    p = sub.add_parser("run-job", help="Run one scheduled job immediately")
    p.add_argument("name", choices=["market-snapshot", "daily-report", "alert-check"])
    p.set_defaults(func=cmd_run_job)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = load_config(args.config)
        agent = MarketAgent(config)
        return args.func(agent, args)
    except Exception as e:
        logger.error(f"Command {args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
