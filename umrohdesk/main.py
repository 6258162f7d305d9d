"""Application entry point"""
import sys
import asyncio
import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler
from PySide6.QtWidgets import QApplication
import qasync

from umrohdesk.config import Settings, settings as default_settings


def setup_logging(log_dir: str = "logs", level: str = "INFO") -> Path:
    """Log to stdout and a rotating file; returns the log file path"""
    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / "umrohdesk.log"

    handlers = [
        logging.StreamHandler(sys.stdout),
        RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ]

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )

    # Supabase client logs every request through httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("=== umrohdesk starting ===")
    logger.info(f"Logs written to: {log_file}")
    return log_file


def main(settings: Settings = default_settings):
    """Main entry point with qasync integration"""
    setup_logging(settings.log_dir, settings.log_level)

    from umrohdesk.ui.main_window import MainWindow

    app = QApplication(sys.argv)
    app.setApplicationName("umrohdesk")

    loop = qasync.QEventLoop(app)
    asyncio.set_event_loop(loop)

    window = MainWindow(settings)
    window.show()

    with loop:
        loop.run_forever()


if __name__ == "__main__":
    main()
