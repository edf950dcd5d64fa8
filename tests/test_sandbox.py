"""
Security tests for the RestrictedPython policy sandbox.

These tests verify that policy code cannot:
- Import unauthorized modules
- Use dangerous built-ins
- Run indefinitely while loading (timeout enforcement)

and that well-behaved policies load and can issue commands.
"""

import pytest

from robotarena.bot_runtime.control import BaseControl
from robotarena.bot_runtime.sandbox import (
    ControlSandbox,
    GuardedControlBase,
    SandboxSecurityError,
    SandboxTimeoutError,
)
from robotarena.core.geometry import Bearing, Coordinates
from robotarena.core.robot import Robot


def create_robot():
    """Helper creating a robot whose commands a loaded policy can drive."""
    return Robot(id="A", position=Coordinates(5, 5), control=BaseControl())


class TestSandboxSecurity:
    """Test that sandbox blocks malicious operations."""

    def test_blocks_file_read_attempt(self):
        """Policy cannot read files: open is replaced by None."""
        malicious_code = """
class MaliciousPolicy(GuardedControlBase):
    def on_start(self, commands):
        with open('/etc/passwd', 'r') as f:
            data = f.read()
"""
        sandbox = ControlSandbox()
        control = sandbox.load_control(malicious_code, "MaliciousPolicy")

        with pytest.raises(TypeError):
            control.on_start(create_robot().commands)

    @pytest.mark.parametrize("module", ["os", "socket", "subprocess", "sys"])
    def test_blocks_module_import(self, module):
        malicious_code = f"""
import {module}

class MaliciousPolicy(GuardedControlBase):
    pass
"""
        sandbox = ControlSandbox()

        with pytest.raises(SandboxSecurityError, match="Import of module.*not allowed"):
            sandbox.load_control(malicious_code, "MaliciousPolicy")

    def test_blocks_eval_builtin(self):
        malicious_code = """
class MaliciousPolicy(GuardedControlBase):
    def on_start(self, commands):
        eval('1 + 1')
"""
        sandbox = ControlSandbox()

        with pytest.raises(SandboxSecurityError, match="Security restrictions violated|Eval calls"):
            sandbox.load_control(malicious_code, "MaliciousPolicy")

    def test_blocks_exec_builtin(self):
        malicious_code = """
class MaliciousPolicy(GuardedControlBase):
    def on_start(self, commands):
        exec('import os')
"""
        sandbox = ControlSandbox()

        with pytest.raises(SandboxSecurityError):
            sandbox.load_control(malicious_code, "MaliciousPolicy")

    def test_blocks_private_attribute_access(self):
        """Policies cannot reach the robot behind the command handle."""
        malicious_code = """
class MaliciousPolicy(GuardedControlBase):
    def on_start(self, commands):
        commands._robot.hit_points = 1000
"""
        sandbox = ControlSandbox()

        with pytest.raises(SandboxSecurityError):
            sandbox.load_control(malicious_code, "MaliciousPolicy")

    def test_rejects_invalid_syntax(self):
        sandbox = ControlSandbox()
        with pytest.raises(SandboxSecurityError):
            sandbox.load_control("this is not valid python code!!!", "Policy")

    def test_rejects_oversized_code(self):
        sandbox = ControlSandbox()
        code = "# padding\n" * 20000
        with pytest.raises(ValueError, match="maximum size"):
            sandbox.load_control(code, "Policy")


class TestSandboxTimeout:
    """Test that loading is bounded in time."""

    def test_enforces_timeout_on_infinite_init(self):
        slow_code = """
class SlowPolicy(GuardedControlBase):
    def __init__(self):
        while True:
            pass
"""
        sandbox = ControlSandbox(timeout_ms=50)

        with pytest.raises(SandboxTimeoutError):
            sandbox.load_control(slow_code, "SlowPolicy")

    def test_enforces_timeout_on_module_level_loop(self):
        slow_code = """
while True:
    pass
"""
        sandbox = ControlSandbox(timeout_ms=50)

        with pytest.raises(SandboxTimeoutError):
            sandbox.load_control(slow_code, "Policy")


class TestSandboxValidCode:
    """Test that legitimate policies load and work."""

    def test_allows_simple_policy(self):
        code = """
class SimplePolicy(GuardedControlBase):
    def on_start(self, commands):
        commands.turn(Bearing.SOUTH)
        commands.forward(2)
"""
        sandbox = ControlSandbox()
        control = sandbox.load_control(code, "SimplePolicy")
        robot = create_robot()

        control.on_start(robot.commands)

        assert robot.bearing is Bearing.SOUTH
        assert robot.velocity == 2

    def test_allows_math_import(self):
        code = """
import math

class MathPolicy(GuardedControlBase):
    def on_start(self, commands):
        commands.forward(int(math.sqrt(16)))
"""
        sandbox = ControlSandbox()
        control = sandbox.load_control(code, "MathPolicy")
        robot = create_robot()

        control.on_start(robot.commands)

        assert robot.velocity == 4

    def test_allows_policy_with_memory(self):
        code = """
class CountingPolicy(GuardedControlBase):
    def __init__(self):
        self.hits = 0

    def on_hit(self, commands):
        self.hits = self.hits + 1
        if self.hits >= 2:
            commands.halt()
"""
        sandbox = ControlSandbox()
        control = sandbox.load_control(code, "CountingPolicy")
        robot = create_robot()
        robot.velocity = 3

        control.on_hit(robot.commands)
        assert robot.velocity == 3
        control.on_hit(robot.commands)
        assert robot.velocity == 0
        assert control.hits == 2

    def test_allows_coordinates_arithmetic(self):
        code = """
class LeadingPolicy(GuardedControlBase):
    def on_enemy_detected(self, commands, enemy_position):
        commands.fire_at(enemy_position.move(Vector(1, 0)))
"""
        sandbox = ControlSandbox()
        control = sandbox.load_control(code, "LeadingPolicy")
        robot = create_robot()

        control.on_enemy_detected(robot.commands, Coordinates(3, 3))

        assert robot.target == Coordinates(4, 3)

    def test_guarded_base_provides_default_handlers(self):
        code = """
class Idle(GuardedControlBase):
    pass
"""
        control = ControlSandbox().load_control(code, "Idle")
        assert isinstance(control, GuardedControlBase)
        control.on_timeout(create_robot().commands, "anything")

    def test_class_not_found(self):
        code = """
class WrongName(GuardedControlBase):
    pass
"""
        with pytest.raises(ValueError, match="not found"):
            ControlSandbox().load_control(code, "Policy")
