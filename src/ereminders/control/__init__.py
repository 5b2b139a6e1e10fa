"""Control channel - operator commands over a Unix domain socket."""

from ereminders.control.client import transmit_command
from ereminders.control.server import ControlServer

__all__ = ["ControlServer", "transmit_command"]
