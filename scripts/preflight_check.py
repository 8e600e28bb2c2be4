#!/usr/bin/env python3
"""
Import the API and both worker entry points, and check that every workflow
action code has a transition. Run before deploying a worker image.
"""
import os
import sys
import traceback


def run() -> int:
    # Config is read at import time; keep imports from reaching for real services
    os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
    print("Running preflight import check...")
    try:
        import regproc.main  # noqa: F401
        print("Import regproc.main: OK")

        import regproc.queue.jobs  # noqa: F401
        print("Import regproc.queue.jobs: OK")

        from regproc.core.status_codes import ALL_ACTIONS
        from regproc.workflow.engine import TRANSITIONS
        missing = sorted(ALL_ACTIONS - set(TRANSITIONS))
        if missing:
            print(f"Preflight check FAILED: no transition for {', '.join(missing)}")
            return 1
        print(f"Workflow transitions: {len(TRANSITIONS)} OK")
    except Exception as e:
        print(f"Preflight check FAILED: {e}")
        traceback.print_exc()
        return 1

    print("Preflight check passed.")
    return 0


if __name__ == "__main__":
    sys.exit(run())
