"""Native functions predefined in the lox global frame. Only a clock is provided."""

import time

from lox.lang.objects import NativeFunction


def clock():
    """Wall-clock time in seconds, as a lox number."""
    return float(time.time())


NATIVES = [
    NativeFunction("clock", 0, clock),
]


def define_natives(environment):
    """Defines every native function in environment (normally the global frame)."""
    for native in NATIVES:
        environment.define(native.name, native)
