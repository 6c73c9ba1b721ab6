import asyncio
import logging

from lineadmin import config, db
from lineadmin.models import SweepSummary
from lineadmin.services.lock_check_service import LockCheckService
from lineadmin.services.lock_store import PostgresLockStore


logger = logging.getLogger("lineadmin.worker")


def process_once(service: LockCheckService) -> SweepSummary:
    return service.check_all_accounts()


async def main():
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    db.init_pool()
    service = LockCheckService(PostgresLockStore())
    logger.info("lock_worker_started interval_seconds=%s", config.LOCK_CHECK_INTERVAL_SECONDS)
    try:
        # First sweep runs immediately at process start.
        while True:
            await asyncio.to_thread(process_once, service)
            await asyncio.sleep(config.LOCK_CHECK_INTERVAL_SECONDS)
    finally:
        db.close_pool()


if __name__ == "__main__":
    asyncio.run(main())
