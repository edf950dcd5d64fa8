"""
Control policy manager for integrating policies with the game engine.

This module loads policies given as source code, delivers engine events to
each robot's policy, and handles policy errors gracefully.
"""

import logging
from typing import Any

from robotarena.bot_runtime.control import RobotControl
from robotarena.bot_runtime.sandbox import ControlSandbox, SandboxSecurityError, SandboxTimeoutError
from robotarena.bot_runtime.templates import get_template, get_template_code
from robotarena.core.robot import Robot

logger = logging.getLogger(__name__)


class ControlError(Exception):
    """Raised when a control policy cannot be loaded."""
    pass


class ControlManager:
    """
    Manages control policies on behalf of the engine.

    Responsibilities:
    - Load and validate policy code through the sandbox
    - Deliver event callbacks to policies
    - Handle policy errors gracefully (disconnect the policy, don't crash the game)
    """

    def __init__(self):
        self.sandbox = ControlSandbox()

    def load_control(self, code: str, class_name: str) -> Any:
        """
        Load and validate policy code, returning a policy instance.

        Args:
            code: Python source code
            class_name: Name of the policy class to instantiate

        Returns:
            Policy instance

        Raises:
            ControlError: If the code is invalid or cannot be loaded
        """
        try:
            control = self.sandbox.load_control(code, class_name)
        except (SandboxSecurityError, SandboxTimeoutError, ValueError) as e:
            error_msg = f"Failed to load policy: {str(e)}"
            logger.error(error_msg)
            raise ControlError(error_msg) from e

        if not isinstance(control, RobotControl):
            raise ControlError(f"Policy class '{class_name}' does not implement all event handlers")

        logger.info(f"Successfully loaded policy class '{class_name}'")
        return control

    def load_template(self, template_id: str) -> Any:
        """
        Load one of the bundled policy templates.

        Raises:
            ControlError: If the template is unknown or fails to load
        """
        try:
            template = get_template(template_id)
            code = get_template_code(template_id)
        except (ValueError, OSError) as e:
            raise ControlError(str(e)) from e
        return self.load_control(code, template["class_name"])

    def deliver(self, robot: Robot, handler: str, *args: Any) -> bool:
        """
        Call one of the robot's policy handlers with its command handle.

        A policy that raises is disconnected: the error is recorded on the
        robot and no further events are delivered to it.

        Args:
            robot: Robot whose policy receives the event
            handler: Handler name, e.g. "on_hit"
            *args: Extra handler arguments after the command handle

        Returns:
            True if the handler ran to completion
        """
        if robot.control_error is not None:
            return False

        try:
            getattr(robot.control, handler)(robot.commands, *args)
        except Exception as e:
            robot.control_error = f"{handler}() failed: {type(e).__name__}: {e}"
            logger.error(f"Robot {robot.id} policy disconnected: {robot.control_error}")
            return False

        return True
