from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

import config
from tasks.restock_tasks import run_restock_check

scheduler = BackgroundScheduler()

# Daily low-stock scan in the application timezone
scheduler.add_job(
    run_restock_check,
    CronTrigger(hour=config.RESTOCK_CRON_HOUR, minute=0, timezone=config.APP_TIMEZONE),
    id='restock_check_job',
)
