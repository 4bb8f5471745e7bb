# SPDX-License-Identifier: GPL-3.0-or-later

import threading

from gi.repository import GLib

from daynotes.background import run_in_background


def run_until_done(func):
    loop = GLib.MainLoop()
    outcome = {}

    def on_done(result, error):
        outcome.update(result=result, error=error, thread=threading.current_thread())
        loop.quit()

    run_in_background(func, on_done)
    timeout_id = GLib.timeout_add_seconds(5, loop.quit)
    loop.run()
    GLib.source_remove(timeout_id)
    return outcome


def test_result_is_delivered_on_the_main_loop():
    outcome = run_until_done(lambda: threading.current_thread().name)

    assert outcome['result'] == 'daynotes-sync'
    assert outcome['error'] is None
    assert outcome['thread'] is threading.main_thread()


def test_errors_are_delivered_not_raised():
    def fail():
        raise OSError('network down')

    outcome = run_until_done(fail)

    assert outcome['result'] is None
    assert isinstance(outcome['error'], OSError)
