"""
Import users from a CSV file on disk and print the batch summary.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from app.ingestion.csv_parser import ParseError
from app.services.user_import_service import get_user_import_service


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Bulk-create users from a CSV file.")
    parser.add_argument("path", help="CSV with name,email,rollNumber,role,programId,sectionId,departmentId.")
    parser.add_argument(
        "--no-mail",
        dest="send_mails",
        action="store_false",
        help="Do not email login credentials to created users.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        result = get_user_import_service().import_users(Path(args.path), send_mails=args.send_mails)
    except ParseError as exc:
        parser.error(str(exc))

    print(json.dumps(result.to_dict(), indent=2, default=str))
    return 0 if not result.write_errors else 1


if __name__ == "__main__":
    raise SystemExit(main())
