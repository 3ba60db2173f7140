#!/usr/bin/env python3
import sys
import os

print("Running preflight import check...")
try:
    # Memory backend: importing the app must not need a reachable Redis
    os.environ.setdefault("STORAGE_BACKEND", "memory")

    import eduverify.main
    print("Import eduverify.main: OK")

    import eduverify.queue.jobs
    print("Import eduverify.queue.jobs: OK")

    print("Preflight check passed.")
    sys.exit(0)
except Exception as e:
    print(f"Preflight check FAILED: {e}")
    import traceback
    traceback.print_exc()
    sys.exit(1)
