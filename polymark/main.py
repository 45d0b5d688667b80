import logging
import sys

from PyQt5.QtWidgets import QApplication

from polymark import __version__
from polymark.config import get_log_dir, load_config
from polymark.ui import MainWindow
from polymark.utils import LoggingConfig

logger = logging.getLogger(__name__)


def main():
    """
    Run the Polymark application.
    An optional PDF path may be passed as the first command-line argument.
    """
    config = load_config()
    LoggingConfig.setup_logging(get_log_dir(), config.log_level)
    logger.info(f"Starting Polymark {__version__}")

    app = QApplication(sys.argv)

    file_path = None
    if len(sys.argv) > 1:
        file_path = sys.argv[1]

    window = MainWindow(config, file_path)
    window.showMaximized()
    sys.exit(app.exec_())


if __name__ == '__main__':
    main()
