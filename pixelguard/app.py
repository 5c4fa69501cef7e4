"""
Application entry point.
"""
import argparse
import logging
import sys

from PyQt5.QtWidgets import QApplication

from . import __version__
from .config import load_user_settings
from .ui import MainWindow
from .utils import configure_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    """
    Run the PixelGuard PDF editor.

    An optional PDF path on the command line is opened at startup.
    """
    argv = sys.argv if argv is None else argv

    parser = argparse.ArgumentParser(prog="pixelguard", description="Redact PDF pages.")
    parser.add_argument("file", nargs="?", help="PDF to open")
    parser.add_argument("--debug", action="store_true", help="verbose logging to the console")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args, qt_args = parser.parse_known_args(argv[1:])

    configure_logging(debug=args.debug)
    settings = load_user_settings()
    logger.info("Starting PixelGuard PDF %s", __version__)

    app = QApplication([argv[0]] + qt_args)
    window = MainWindow(settings, args.file)
    window.show()
    sys.exit(app.exec_())


if __name__ == '__main__':
    main()
