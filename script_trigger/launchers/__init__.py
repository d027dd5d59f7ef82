"""Launchers — where and how scripts are executed.

launchers/
  base.py         — Launcher ABC (the command-execution capability)
  interpreters.py — Shell / BatchFile script conventions
  process.py      — ManagedProcess (subprocess + psutil tree kill)
  local.py        — LocalLauncher (the controller)
  remote.py       — RemoteLauncher (node agent over HTTP)
  factory.py      — LauncherFactory (target → launcher)
"""

from script_trigger.launchers.base import Launcher, OutputListener
from script_trigger.launchers.factory import LauncherFactory
from script_trigger.launchers.interpreters import (
    BatchFile,
    CommandInterpreter,
    Shell,
    interpreter_for,
)
from script_trigger.launchers.local import LocalLauncher
from script_trigger.launchers.remote import RemoteLauncher

__all__ = [
    "BatchFile",
    "CommandInterpreter",
    "Launcher",
    "LauncherFactory",
    "LocalLauncher",
    "OutputListener",
    "RemoteLauncher",
    "Shell",
    "interpreter_for",
]
