#!/usr/bin/env python3

# orderledger/test_scripts/reconcile_cli.py

"""
CLI entrypoint for ledger reconciliation (all ledger tabs -> mirror table).

Usage examples:
    # Rebuild the mirror for one owner
    python -m test_scripts.reconcile_cli --owner-id 42 --log-level INFO

    # Smaller insert chunks, then re-link personal orders
    python -m test_scripts.reconcile_cli --owner-id 42 --batch-size 200 --purchase-status

Flags:
    --owner-id ID         Owner whose linked spreadsheet is reconciled (required)
    --batch-size N        Rows per insert chunk (capped at 500)
    --purchase-status     Run the personal-order purchase status search afterwards
    --log-level LEVEL     Logging level (INFO, DEBUG, etc.)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from orderledger.db.session import SessionLocal
from orderledger.jobs.reconcile_job import run_reconcile_all
from orderledger.services.purchase_status_service import search_purchase_status


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rebuild an owner's mirror table from the ledger spreadsheet.")
    parser.add_argument("--owner-id", type=str, required=True, help="Owner id (users_api.user_id).")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Rows per insert chunk (default MIRROR_INSERT_BATCH_SIZE).",
    )
    parser.add_argument(
        "--purchase-status",
        action="store_true",
        help="Match personal orders to mirror rows after reconciling.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (e.g. INFO, DEBUG).",
    )
    return parser.parse_args()


def configure_logging(level: str) -> None:
    """Configure JSON logging for the app"""
    from orderledger.config import setup_json_logging
    lvl = getattr(logging, level.upper(), logging.INFO)
    setup_json_logging(log_level=lvl)


def main() -> int:
    args = parse_args()
    configure_logging(args.log_level)
    logger = logging.getLogger("orderledger.reconcile_cli")
    logger.info("reconcile.cli.start", extra={"owner_id": args.owner_id})

    db = SessionLocal()
    try:
        result = run_reconcile_all(db, args.owner_id, batch_size=args.batch_size)
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

        if args.purchase_status:
            matched = search_purchase_status(db, args.owner_id)
            print(json.dumps(matched.to_dict(), indent=2, ensure_ascii=False))

        logger.info("reconcile.cli.done", extra={"total": result.total_count})
        return 0
    except KeyboardInterrupt:
        logger.warning("reconcile.cli.interrupted")
        return 130
    except Exception:
        logger.exception("reconcile.cli.error")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
