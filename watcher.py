import logging
import time

from dotenv import load_dotenv

from services.email_service import SendGridMailer
from services.notification_service import NotificationService
from services.trigger_watcher import TriggerWatcher
from utils.config import Config
from utils.firebase import initialize_firebase

logger = logging.getLogger("wifi_admin.watcher")


def main():
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = Config()
    _, db = initialize_firebase(config)
    watcher = TriggerWatcher(
        db,
        NotificationService(db),
        SendGridMailer(config.sendgrid_api_key, config.email_sender)
    )
    watcher.start()
    logger.info("🔔 Notification triggers running")

    try:
        while True:
            time.sleep(60)
    except KeyboardInterrupt:
        logger.info("Stopping notification triggers")
    finally:
        watcher.stop()


if __name__ == '__main__':
    main()
