import logging

from sqlalchemy.orm import Session

from database import SessionLocal
from exceptions import WholesaleError
from services.restock_planner import RestockPlanner

logger = logging.getLogger(__name__)


def run_restock_check():
    """
    Scheduled low-stock scan.

    Opens its own session, since it runs outside any request, and creates or
    extends pending provider orders for every provider with low-stock items.
    """
    logger.info("Starting scheduled low stock check.")
    db: Session = SessionLocal()
    try:
        summary = RestockPlanner(db, actor="scheduler").check_and_create_orders()
        logger.info(
            f"Scheduled low stock check finished: {summary.low_stock_items_count} low-stock item(s), "
            f"{len(summary.created_order_ids)} order(s) created, {len(summary.appended_order_ids)} extended."
        )
        return summary
    except WholesaleError as e:
        logger.error(f"Scheduled low stock check failed: {e}")
    finally:
        db.close()
