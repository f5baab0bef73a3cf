import argparse
import json
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from quits.app.run import run_scan
from quits.config.settings import GMAIL_QUERY, LOGS_DIR, STORE_PATH


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Scan Gmail for subscription emails and report price changes."
    )
    parser.add_argument(
        "--store",
        dest="store_path",
        type=Path,
        default=STORE_PATH,
        help="Path to the subscription store JSON file.",
    )
    parser.add_argument(
        "--query",
        dest="query",
        default=GMAIL_QUERY,
        help="Gmail search query used to find candidate emails.",
    )
    parser.add_argument(
        "--days",
        dest="newer_than_days",
        type=int,
        default=None,
        help="Only scan mail newer than this many days.",
    )
    parser.add_argument(
        "--max-results",
        dest="max_results",
        type=int,
        default=200,
        help="Maximum number of messages to scan.",
    )
    parser.add_argument(
        "--access-token",
        dest="access_token",
        default=os.getenv("QUITS_GMAIL_ACCESS_TOKEN"),
        help="Gmail access token; falls back to the local OAuth flow when omitted.",
    )
    parser.add_argument(
        "--verbose",
        dest="verbose",
        action="store_true",
        help="Print progress while scanning.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    summary = run_scan(
        store_path=args.store_path,
        access_token=args.access_token,
        query=args.query,
        newer_than_days=args.newer_than_days,
        max_results=args.max_results,
        verbose=args.verbose,
    )

    out_path = LOGS_DIR / "last_scan.json"
    out_path.write_text(json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8")
    print(json.dumps(summary, indent=2, ensure_ascii=False))
    print(f"[state] summary written to {out_path}")


if __name__ == "__main__":
    main()
