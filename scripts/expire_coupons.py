"""
Coupon expiry sweep.

Flips every coupon whose validity window has ended to EXPIRED. Meant to run
periodically from cron or a scheduler:

    python scripts/expire_coupons.py
"""
import asyncio
import sys

from dotenv import load_dotenv

from larder.application.services import CouponService
from larder.infrastructure.database import Database
from larder.infrastructure.logging import get_logger
from larder.settings import get_app_settings


logger = get_logger("larder.scripts.expire_coupons")


async def main() -> int:
    load_dotenv()
    settings = get_app_settings()

    database = Database(settings.database)
    try:
        await database.init()
        service = CouponService(database.session_factory)
        expired = await service.expire_coupons()
        logger.info(f"✅ Expiry sweep finished: {expired} coupon(s) expired")
        return 0
    except Exception as e:
        logger.error(f"❌ Expiry sweep failed: {e}", exc_info=True)
        return 1
    finally:
        await database.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
