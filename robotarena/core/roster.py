"""
Game setup from a roster description.

The only external configuration a game takes is the arena size and the
list of robots with their policies. GameSetup validates that description
up front so a bad roster fails before any tick runs.
"""

import logging
import random
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from robotarena.core.engine import ArenaConfigError, GameEngine

logger = logging.getLogger(__name__)


class RobotEntry(BaseModel):
    """One robot and where its policy comes from."""
    id: str = Field(..., min_length=1, description="Unique robot id; first character is drawn")
    control: Optional[Any] = Field(default=None, description="Policy object")
    code: Optional[str] = Field(default=None, min_length=1, description="Policy source code")
    class_name: Optional[str] = Field(default=None, min_length=1, description="Policy class inside `code`")
    template: Optional[str] = Field(default=None, min_length=1, description="Bundled template id")

    @model_validator(mode="after")
    def check_single_source(self) -> "RobotEntry":
        sources = [self.control is not None, self.code is not None, self.template is not None]
        if sum(sources) != 1:
            raise ValueError("exactly one of control, code or template must be given")
        if self.code is not None and self.class_name is None:
            raise ValueError("class_name is required with code")
        return self


class GameSetup(BaseModel):
    """Arena size plus the initial roster."""
    width: int = Field(..., gt=0, description="Arena width in cells")
    height: int = Field(..., gt=0, description="Arena height in cells")
    seed: Optional[int] = Field(default=None, description="Seed for reproducible placement")
    robots: List[RobotEntry] = Field(default_factory=list)

    @field_validator("robots")
    @classmethod
    def check_unique_ids(cls, robots: List[RobotEntry]) -> List[RobotEntry]:
        seen = set()
        for entry in robots:
            if entry.id in seen:
                raise ValueError(f"duplicate robot id '{entry.id}'")
            seen.add(entry.id)
        return robots


def parse_setup(data: Any) -> GameSetup:
    """
    Validate a roster description.

    Args:
        data: A GameSetup or a mapping with width, height, seed and robots

    Raises:
        ArenaConfigError: If the description is invalid
    """
    if isinstance(data, GameSetup):
        return data
    try:
        return GameSetup.model_validate(data)
    except ValidationError as e:
        raise ArenaConfigError(f"Invalid game setup: {e}") from e


def build_game(data: Any) -> GameEngine:
    """
    Create a game and register every robot of the roster, in order.

    Raises:
        ArenaConfigError: If the setup is invalid
        ControlError: If a policy fails to load
    """
    setup = parse_setup(data)
    rng = random.Random(setup.seed) if setup.seed is not None else None
    engine = GameEngine(setup.width, setup.height, rng=rng)

    for entry in setup.robots:
        if entry.control is not None:
            engine.add_robot(entry.id, entry.control)
        elif entry.code is not None:
            engine.add_code_robot(entry.id, entry.code, entry.class_name)
        else:
            engine.add_template_robot(entry.id, entry.template)

    logger.info(f"Game ready: {setup.width}x{setup.height} arena, {len(setup.robots)} robots")
    return engine
