from fastapi import Request

from fieldjobs.core import SystemClock

_system_clock = SystemClock()


def get_clock(request: Request):
    """Clock for the current request; the app may pin one on its state"""
    return getattr(request.app.state, "clock", None) or _system_clock
