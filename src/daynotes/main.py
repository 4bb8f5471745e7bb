# SPDX-License-Identifier: GPL-3.0-or-later

import logging
import os
import sys

from daynotes.application import DayNotesApp

LOG_FORMAT = '%(asctime)s [%(name)s:%(levelname)s] %(message)s'


def setup_logging():
    level = os.environ.get('DAYNOTES_LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


def main(argv=None):
    setup_logging()
    app = DayNotesApp()
    return app.run(sys.argv if argv is None else argv)


if __name__ == '__main__':
    sys.exit(main())
