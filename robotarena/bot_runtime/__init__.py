"""
Control policy runtime for Robot Arena.

This package provides:
- The policy interface (control.py)
- RestrictedPython sandbox for policies given as source code (sandbox.py)
- Policy templates (templates/)
"""

from robotarena.bot_runtime.control import (
    BaseControl,
    Commands,
    RobotControl,
)
from robotarena.bot_runtime.sandbox import (
    ControlSandbox,
    GuardedControlBase,
    SandboxSecurityError,
    SandboxTimeoutError,
)

__all__ = [
    # Interface
    "BaseControl",
    "Commands",
    "RobotControl",
    # Sandbox
    "ControlSandbox",
    "GuardedControlBase",
    "SandboxSecurityError",
    "SandboxTimeoutError",
]
