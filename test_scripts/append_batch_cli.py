#!/usr/bin/env python3

# orderledger/test_scripts/append_batch_cli.py

"""
CLI entrypoint for appending order items to an owner's new-orders tab.

Usage examples:
    # Append items from a JSON file (a list of order item objects)
    python -m test_scripts.append_batch_cli --owner-id 42 --orders-file orders.json

    # Read items from stdin
    cat orders.json | python -m test_scripts.append_batch_cli --owner-id 42 --orders-file -

Each item: {"item_name", "option_name", "quantity", "option_id", "barcode"?}

Flags:
    --owner-id ID         Owner whose linked spreadsheet receives the rows (required)
    --orders-file PATH    JSON file with the order items, "-" for stdin (required)
    --log-level LEVEL     Logging level (INFO, DEBUG, etc.)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from orderledger.db.session import SessionLocal
from orderledger.errors import LedgerError
from orderledger.services.ledger_append_service import append_batch


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Append order items to the ledger's new-orders tab.")
    parser.add_argument("--owner-id", type=str, required=True, help="Owner id (users_api.user_id).")
    parser.add_argument("--orders-file", type=str, required=True, help='JSON list of order items, "-" for stdin.')
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


def load_orders(path: str) -> list:
    if path == "-":
        data = json.load(sys.stdin)
    else:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("orders file must contain a JSON list")
    return data


def main() -> int:
    args = parse_args()
    configure_logging(args.log_level)
    logger = logging.getLogger("orderledger.append_batch_cli")
    logger.info("append.cli.start", extra={"owner_id": args.owner_id})

    db = SessionLocal()
    try:
        orders = load_orders(args.orders_file)
        result = append_batch(db, args.owner_id, orders)
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        logger.info("append.cli.done", extra={"range": result.range, "processed": result.processed_count})
        return 0
    except KeyboardInterrupt:
        logger.warning("append.cli.interrupted")
        return 130
    except LedgerError as e:
        logger.error("append.cli.failed", extra={"error": e.code, "reason": e.message})
        return 1
    except Exception:
        logger.exception("append.cli.error")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
