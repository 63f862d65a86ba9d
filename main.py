# tracker/main.py
import os, sys
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
import logging

from api import build_services, create_app
from core.settings import SERVER, SHEETS_SYNC
from services.sheets_sync import SheetsSyncDaemon
from storage.db import init_db


def main():
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger = logging.getLogger("tracker")

    init_db()
    services = build_services()
    app = create_app(services)

    daemon = SheetsSyncDaemon(services.sync)
    if SHEETS_SYNC.enabled:
        daemon.start()
    try:
        logger.info("Server running on http://localhost:%s", SERVER.port)
        app.run(host=SERVER.host, port=SERVER.port, threaded=True, use_reloader=False)
    finally:
        daemon.stop()


if __name__ == "__main__":
    main()
