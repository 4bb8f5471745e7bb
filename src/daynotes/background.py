# SPDX-License-Identifier: GPL-3.0-or-later

import logging
import threading

from gi.repository import GLib

logger = logging.getLogger(__name__)


def run_in_background(func, on_done):
    """Call func() on a worker thread and report back on the main loop.

    on_done(result, error) is dispatched with GLib.idle_add, so it runs on
    the thread iterating the default main context. Exactly one of result
    and error is meaningful; error is the exception func raised, or None.
    """

    def _worker():
        try:
            result, error = func(), None
        except Exception as e:
            logger.debug('Background call %r failed', func, exc_info=True)
            result, error = None, e
        GLib.idle_add(_deliver, result, error)

    def _deliver(result, error):
        on_done(result, error)
        return GLib.SOURCE_REMOVE

    thread = threading.Thread(target=_worker, name='daynotes-sync', daemon=True)
    thread.start()
    return thread
