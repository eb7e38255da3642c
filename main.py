"""
Command-line entry point for asset issuance and fractional purchase.

Commands:
  create    Mint a new asset token from a JSON request file.
  purchase  Buy fractions of an existing asset from a JSON request file.
  asset     Show ledger metadata and pricing for an asset id.
  prices    Show the latest oracle prices for the configured feeds.
  prove     Generate an eligibility or range proof from a JSON request file.
  update-prices
            Post fresh oracle prices on-chain for the configured feeds.

Each run archives its result and the day's log into a timestamped folder
under ``outcomes/``.  The exit status is 0 on success and 1 on failure.

Usage::

    uv run main.py create --request requests/create_invoice.json
    uv run main.py purchase --request requests/buy_10.json
    uv run main.py asset --id 7
    uv run main.py prices
    uv run main.py prove --request requests/range_proof.json
    uv run main.py update-prices --feed 0xff61...
"""
import argparse
import json
import os
import shutil
import sys
from datetime import datetime
from typing import Any, Dict

from loguru import logger

from src.rwaflow.utils.logger import log_file_name, setup_logger

setup_logger()

from src.rwaflow.clients.factory import build_service  # noqa: E402
from src.rwaflow.core.errors import RWAOrchestrationError, ValidationError  # noqa: E402
from src.rwaflow.core.types import CreateAssetRequest, ProofRequest, PurchaseRequest  # noqa: E402
from src.rwaflow.core.validator import parse_request  # noqa: E402
from src.rwaflow.utils.config import load_config  # noqa: E402


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def create_outcome_dir(command: str) -> str:
    """Create and return a timestamped output directory under ``outcomes/``."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    target_dir = os.path.join("outcomes", f"{timestamp}_{command}")
    os.makedirs(target_dir, exist_ok=True)

    logger.info(f"Output directory created: {target_dir}")
    return target_dir


def save_json(data: Any, folder: str, filename: str) -> None:
    """Serialise *data* as pretty-printed JSON into *folder*/*filename*."""
    path = os.path.join(folder, filename)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False, default=str)
    logger.success(f"Saved {filename}")


def load_request(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def archive_current_log(target_dir: str) -> None:
    """Copy today's log file into *target_dir* for post-mortem analysis."""
    try:
        src_log = os.path.join("logs", log_file_name(datetime.now().strftime("%Y-%m-%d")))
        if os.path.exists(src_log):
            dst_log = os.path.join(target_dir, "execution.log")
            shutil.copy2(src_log, dst_log)
            logger.info(f"Archived execution log to {dst_log}")
        else:
            logger.warning("Log file not found for archiving.")
    except OSError as e:
        logger.warning(f"Failed to archive log: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="RWA Flow: asset issuance and fractional sales",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Mint a new asset token")
    create.add_argument("--request", required=True, help="Path to a JSON create request")

    purchase = sub.add_parser("purchase", help="Purchase fractions of an asset")
    purchase.add_argument("--request", required=True, help="Path to a JSON purchase request")

    asset = sub.add_parser("asset", help="Show asset metadata")
    asset.add_argument("--id", type=int, required=True, dest="asset_id", help="Asset id")

    prices = sub.add_parser("prices", help="Show latest oracle prices")
    prices.add_argument(
        "--feed", action="append", dest="feeds",
        help="Feed id (repeatable); defaults to every configured feed",
    )

    prove = sub.add_parser("prove", help="Generate a standalone proof")
    prove.add_argument("--request", required=True, help="Path to a JSON proof request")

    update = sub.add_parser("update-prices", help="Post oracle price updates on-chain")
    update.add_argument(
        "--feed", action="append", dest="feeds",
        help="Feed id (repeatable); defaults to every configured feed",
    )
    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def run_command(args: argparse.Namespace, service, config) -> Dict[str, Any]:
    """Execute one command and return its JSON-ready result."""
    if args.command == "create":
        try:
            request = parse_request(CreateAssetRequest, load_request(args.request))
        except ValidationError as e:
            return e.to_response_fields()
        return service.create_asset(request).model_dump(exclude_none=True)

    if args.command == "purchase":
        try:
            request = parse_request(PurchaseRequest, load_request(args.request))
        except ValidationError as e:
            return e.to_response_fields()
        return service.purchase_fraction(request).model_dump(exclude_none=True)

    if args.command == "asset":
        try:
            view = service.get_asset(args.asset_id)
        except RWAOrchestrationError as e:
            return e.to_response_fields()
        return {"success": True, "asset": view.model_dump()}

    if args.command == "prove":
        try:
            request = parse_request(ProofRequest, load_request(args.request))
        except ValidationError as e:
            return e.to_response_fields()
        return service.generate_proof(request).model_dump(exclude_none=True)

    feeds = args.feeds or config.pyth.price_feeds.all()
    if args.command == "update-prices":
        return service.update_prices(feeds).model_dump(exclude_none=True)

    quotes = service.get_oracle_prices(feeds)
    return {
        "success": True,
        "prices": [
            {**q.model_dump(), "decimal_price": float(q.as_decimal())} for q in quotes
        ],
    }


def main() -> None:
    args = build_parser().parse_args()
    output_dir = create_outcome_dir(args.command)

    try:
        config = load_config()
        service = build_service(config)

        logger.info(f"Running command [{args.command.upper()}]...")
        result = run_command(args, service, config)
        save_json(result, output_dir, f"{args.command}_result.json")

        if result.get("success"):
            logger.success("-" * 30)
            logger.success(f"{args.command.upper()} COMPLETE")
            logger.success(f"Results archived to: {output_dir}")
            logger.success("-" * 30)
        else:
            logger.error(
                f"{args.command.upper()} FAILED "
                f"[{result.get('status_code')}]: {result.get('error')}"
            )

        archive_current_log(output_dir)
        sys.exit(0 if result.get("success") else 1)

    except Exception as e:
        logger.exception(f"Command failed: {e}")
        archive_current_log(output_dir)
        sys.exit(1)


if __name__ == "__main__":
    main()
