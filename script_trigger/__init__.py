"""script-trigger — Poll a workload's trigger condition with a shell or batch script.

On every polling cycle an inline script and/or a script file is executed on
an execution target (the controller or a remote node agent); the cycle
reports a change when the script exits with the expected code.

Layers (bottom to top):
    1. Models / config / logging / exceptions
    2. Launchers   — local subprocess or remote node agent (HTTP)
    3. Runner      — macro resolution, script artifacts, exit codes
    4. Evaluator   — expected code, source ordering, decision log
    5. Trigger     — scheduler-facing poll(), persisted poll log
    6. Agent / CLI — FastAPI node agent, Typer command line
"""

__version__ = "0.1.0"
__author__ = "script-trigger Contributors"
__license__ = "Apache-2.0"

from script_trigger.evaluator import ConditionEvaluator
from script_trigger.models import ExecutionTarget, PollResult, TriggerConfig, Workload
from script_trigger.runner import RemoteScriptRunner
from script_trigger.trigger import ScriptTrigger

__all__ = [
    "__version__",
    "ConditionEvaluator",
    "ExecutionTarget",
    "PollResult",
    "RemoteScriptRunner",
    "ScriptTrigger",
    "TriggerConfig",
    "Workload",
]
