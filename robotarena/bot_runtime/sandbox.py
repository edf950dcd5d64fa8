"""
RestrictedPython sandbox for control policies submitted as source code.

This module provides a restricted environment for loading policy classes:
- Restricts imports to the configured modules (math and random by default)
- Blocks file system and network access
- Blocks dangerous built-ins (eval, exec, compile, open, etc.)
- Enforces an execution timeout while the code is loaded and instantiated

The timeout only covers loading. Event handlers run synchronously inside
the engine's tick like any other policy.
"""

import importlib
import logging
import signal
from typing import Any, Dict, Optional

from RestrictedPython import compile_restricted, safe_globals
from RestrictedPython.Eval import default_guarded_getitem, default_guarded_getiter
from RestrictedPython.Guards import (
    full_write_guard,
    guarded_iter_unpack_sequence,
    guarded_unpack_sequence,
    safe_builtins,
    safer_getattr,
)

from robotarena.config import get_settings
from robotarena.core.geometry import Bearing, Coordinates, Vector

logger = logging.getLogger(__name__)


class GuardedControlBase:
    """
    Base class that provides guarded attribute access for RestrictedPython.

    Policy classes loaded through the sandbox inherit from this so they can
    keep state on `self`.
    """

    def __guarded_setattr__(self, name: str, value: Any) -> None:
        """Allow attribute assignment in RestrictedPython sandbox."""
        object.__setattr__(self, name, value)

    def __guarded_delattr__(self, name: str) -> None:
        """Allow attribute deletion in RestrictedPython sandbox."""
        object.__delattr__(self, name)

    # Default no-op handlers so policies override only what they need
    def on_start(self, commands):
        pass

    def on_collided(self, commands):
        pass

    def on_timeout(self, commands, state):
        pass

    def on_obstacle_ahead(self, commands):
        pass

    def on_hit(self, commands):
        pass

    def on_enemy_detected(self, commands, enemy_position):
        pass


class SandboxSecurityError(Exception):
    """Raised when policy code attempts a forbidden operation."""
    pass


class SandboxTimeoutError(Exception):
    """Raised when policy code exceeds the loading time limit."""
    pass


def _timeout_handler(signum, frame):
    """Signal handler for execution timeout."""
    raise SandboxTimeoutError("Policy execution exceeded time limit")


def _make_safe_import(allowed_modules: tuple):
    """
    Build the restricted __import__ for policy code.

    Args:
        allowed_modules: Names of the modules policy code may import

    Returns:
        An __import__ replacement raising SandboxSecurityError for anything else
    """
    def _safe_import(name, *args, **kwargs):
        if name not in allowed_modules:
            raise SandboxSecurityError(
                f"Import of module '{name}' is not allowed. "
                f"Permitted modules: {', '.join(allowed_modules)}"
            )
        return importlib.import_module(name)

    return _safe_import


def _create_safe_globals(allowed_modules: tuple) -> Dict[str, Any]:
    """
    Create a safe globals dictionary for policy code.

    Returns:
        Dictionary with only safe built-ins, allowed imports and the
        arena value types
    """
    restricted_builtins = safe_builtins.copy()

    restricted_builtins.update({
        'dict': dict,
        'list': list,
        'set': set,
        'enumerate': enumerate,
        'any': any,
        'all': all,
        'hasattr': hasattr,
        'getattr': getattr,
        'min': min,
        'max': max,
        'sum': sum,
    })

    restricted_builtins['__import__'] = _make_safe_import(allowed_modules)

    # Block dangerous functions by setting to None
    restricted_builtins.update({
        'eval': None,
        'exec': None,
        'compile': None,
        'open': None,
        'globals': None,
        'locals': None,
    })

    safe_dict = safe_globals.copy()

    safe_globals_builtins = safe_globals['__builtins__']
    restricted_builtins['setattr'] = safe_globals_builtins['setattr']
    restricted_builtins['delattr'] = safe_globals_builtins['delattr']
    restricted_builtins['_getattr_'] = safe_globals_builtins['_getattr_']

    safe_dict['__builtins__'] = restricted_builtins

    # Required RestrictedPython guards
    safe_dict.update({
        '_iter_unpack_sequence_': guarded_iter_unpack_sequence,
        '_unpack_sequence_': guarded_unpack_sequence,
        '_getattr_': safer_getattr,
        '_getitem_': default_guarded_getitem,
        '_getiter_': default_guarded_getiter,
        '_write_': full_write_guard,
        '__metaclass__': type,
        '__name__': 'restricted_policy',
        # Names policy code may use without importing
        'GuardedControlBase': GuardedControlBase,
        'Bearing': Bearing,
        'Coordinates': Coordinates,
        'Vector': Vector,
    })

    return safe_dict


class ControlSandbox:
    """
    Loads policy classes from source code using RestrictedPython.

    Example:
        sandbox = ControlSandbox(timeout_ms=100)
        control = sandbox.load_control(code_string, "PolicyClassName")
    """

    def __init__(self, timeout_ms: Optional[int] = None):
        """
        Initialize the sandbox.

        Args:
            timeout_ms: Loading timeout in milliseconds (default from config)
        """
        self.settings = get_settings()
        self.timeout_ms = timeout_ms or self.settings.sandbox.EXECUTION_TIMEOUT_MS
        self.timeout_seconds = self.timeout_ms / 1000.0

    def _run_with_timeout(self, func, *args):
        signal.signal(signal.SIGALRM, _timeout_handler)
        signal.setitimer(signal.ITIMER_REAL, self.timeout_seconds)
        try:
            return func(*args)
        finally:
            signal.setitimer(signal.ITIMER_REAL, 0)

    def load_control(self, code: str, class_name: str) -> Any:
        """
        Compile policy code in the restricted environment and instantiate it.

        Args:
            code: Python source code as string
            class_name: Name of the policy class to instantiate

        Returns:
            Instance of the policy class

        Raises:
            SandboxSecurityError: If code attempts forbidden operations
            SandboxTimeoutError: If loading exceeds the timeout
            ValueError: If the code is too large or the class is not found
        """
        max_size_kb = self.settings.sandbox.MAX_CODE_SIZE_KB
        if len(code.encode('utf-8')) > max_size_kb * 1024:
            raise ValueError(f"Policy code exceeds maximum size of {max_size_kb}KB")

        try:
            byte_code = compile_restricted(code, filename='<policy_code>', mode='exec')
        except SyntaxError as e:
            # RestrictedPython raises SyntaxError for security violations
            raise SandboxSecurityError(f"Security restrictions violated: {str(e)}")

        # One namespace so module-level imports are visible inside methods
        namespace = _create_safe_globals(tuple(self.settings.sandbox.ALLOWED_IMPORTS))

        try:
            self._run_with_timeout(exec, byte_code, namespace)
        except (SandboxTimeoutError, SandboxSecurityError):
            raise
        except Exception as e:
            raise SandboxSecurityError(f"Policy code execution failed: {str(e)}")

        control_class = namespace.get(class_name)
        if not isinstance(control_class, type):
            raise ValueError(f"Policy class '{class_name}' not found in code")

        try:
            control = self._run_with_timeout(control_class)
        except SandboxTimeoutError:
            raise SandboxTimeoutError("Policy __init__() exceeded time limit")
        except Exception as e:
            raise SandboxSecurityError(f"Policy instantiation failed: {str(e)}")

        logger.debug(f"Sandbox loaded policy class '{class_name}'")
        return control
