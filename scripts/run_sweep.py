"""Run one large-store sweep: delete large objects of logically expired pastes.

Usage:
    python -m scripts.run_sweep [unix_timestamp]
If the timestamp is omitted, sweeps at the current time. Meant to be run
from a scheduler (cron, k8s CronJob) on a fixed interval.
Backends come from the usual settings (KV_BACKEND, BLOB_BACKEND, ...).
"""

import asyncio
import sys

from pastebin.core.lifespan import create_engine_lifespan
from pastebin.shared.telemetry.logging import setup_logging
from pastebin.shared.utils.datetime import from_timestamp_utc, utc_now


async def main() -> None:
    """Sweep once and report totals."""
    setup_logging()
    if len(sys.argv) > 1:
        try:
            now = from_timestamp_utc(int(sys.argv[1]))
        except ValueError:
            print(f"Invalid unix timestamp: {sys.argv[1]}", file=sys.stderr)
            sys.exit(1)
    else:
        now = utc_now()

    async with create_engine_lifespan() as storage:
        result = await storage.clean_expired_in_large_store(now)

    print(
        f"Done. Scanned {result.scanned} record(s), cleaned {result.cleaned} "
        f"large object(s), {result.failed_batches} failed batch(es)"
    )
    if result.failed_batches:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
