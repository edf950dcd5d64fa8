"""
Robot Arena Configuration

This file contains all configurable simulation settings.
Modify these values to tune the game behaviour.
"""

from dataclasses import dataclass


@dataclass
class ArenaConfig:
    """Arena dimensions used when no explicit size is given."""
    DEFAULT_WIDTH: int = 80
    DEFAULT_HEIGHT: int = 40


@dataclass
class RobotConfig:
    """Per-robot limits and starting values."""
    START_HIT_POINTS: int = 100
    MAX_VELOCITY: int = 5  # cells per tick
    RANGE_FINDER_DISTANCE: int = 8  # probe distance for obstacle-ahead warnings


@dataclass
class CombatConfig:
    """Damage and radius settings."""
    RAM_DAMAGE: int = 10  # robot that drives into another robot
    RAMMED_DAMAGE: int = 5  # robot that was driven into
    WALL_DAMAGE: int = 5  # robot that drives into the arena edge
    BLAST_DAMAGE: int = 10
    BLAST_RADIUS: int = 2  # 5x5 square
    DETECTION_RADIUS: int = 5  # 11x11 square


@dataclass
class SandboxConfig:
    """Sandbox settings for policies submitted as source code."""
    EXECUTION_TIMEOUT_MS: int = 100  # load and instantiate budget
    MAX_CODE_SIZE_KB: int = 100
    ALLOWED_IMPORTS: tuple = ("math", "random")


@dataclass
class Settings:
    """Main settings container."""
    arena: ArenaConfig = None
    robot: RobotConfig = None
    combat: CombatConfig = None
    sandbox: SandboxConfig = None

    # Application info
    APP_NAME: str = "RobotArena"
    VERSION: str = "0.1.0"

    def __post_init__(self):
        self.arena = self.arena or ArenaConfig()
        self.robot = self.robot or RobotConfig()
        self.combat = self.combat or CombatConfig()
        self.sandbox = self.sandbox or SandboxConfig()


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
