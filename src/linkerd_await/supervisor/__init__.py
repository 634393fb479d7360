"""Supervisor package for handing control to the wrapped command.

Key Components:
    - SupervisionMode: Exec-replace or fork-then-shutdown
    - ChildSpec: The command to run
    - ChildExit: How a forked child terminated
    - ProcessSupervisor: Runs the child in the chosen mode
"""

from ._models import ChildExit, ChildSpec, SupervisionMode
from ._supervisor import FORWARDED_SIGNALS, ExecFunction, ProcessSupervisor

__all__ = [
    "FORWARDED_SIGNALS",
    "ChildExit",
    "ChildSpec",
    "ExecFunction",
    "ProcessSupervisor",
    "SupervisionMode",
]
