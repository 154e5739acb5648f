# backend/app/cli/__main__.py
from __future__ import annotations

import argparse
import json

from app.db import SessionLocal, init_db
from app.logging_config import configure_logging
from app.middleware.request_id import bound_request_id
from app.services.heartbeat import run_heartbeat


def main() -> None:
    p = argparse.ArgumentParser(prog="python -m app.cli")
    sub = p.add_subparsers(dest="command", required=True)

    hb = sub.add_parser("heartbeat", help="run one proactive sweep and print the summary")
    hb.add_argument("--user-id", default=None, help="scan only this user (skips the opt-in list)")

    sub.add_parser("init-db", help="create all tables (dev/sqlite)")

    args = p.parse_args()
    configure_logging()

    if args.command == "init-db":
        init_db()
        print(json.dumps({"ok": True}))
        return

    with bound_request_id(prefix="cli-"):
        db = SessionLocal()
        try:
            res = run_heartbeat(db, target_user_id=args.user_id)
        finally:
            db.close()
    print(json.dumps(res.to_dict(), indent=2))


if __name__ == "__main__":
    main()
