# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

import signal
import syslog
import threading


def format_elapsed(seconds):
    """
    Format seconds as h:mm:ss.
    """
    m, s = divmod(seconds, 60)
    h, m = divmod(m, 60)
    return "%d:%02d:%02d" % (h, m, s)


def syslog_elapsed_time(seconds, msg):
    """
    Log a message (msg) to syslog with elapsed time (seconds).
    """
    syslog.syslog("%s Elapsed: %s" % (msg, format_elapsed(seconds)))


class DelayedKeyboardInterrupt(object):
    """
    Hold off SIGINT until the block exits so a write is never torn.

    Signal handlers can only be installed from the main thread; elsewhere
    this is a no-op.
    """

    def __enter__(self):
        self.signal_received = False
        self.installed = threading.current_thread() is threading.main_thread()
        if self.installed:
            self.old_handler = signal.signal(signal.SIGINT, self.handler)
        return self

    def handler(self, sig, frame):
        self.signal_received = (sig, frame)
        print("\nSIGINT received. Delaying KeyboardInterrupt.", flush=True)

    def __exit__(self, type, value, traceback):
        if not self.installed:
            return
        # None means the previous handler was not installed from Python
        if self.old_handler is None:
            self.old_handler = signal.default_int_handler
        signal.signal(signal.SIGINT, self.old_handler)
        if self.signal_received and callable(self.old_handler):
            self.old_handler(*self.signal_received)
