"""
Policy templates for Robot Arena.

Templates are policy source files loaded through the sandbox, not imported
as modules. They double as starting points for writing new policies.
"""

import os

# Template metadata
TEMPLATES = [
    {
        "id": "wanderer",
        "name": "Wanderer",
        "class_name": "Wanderer",
        "description": "Roams the arena, bounces off collisions, turns away from walls and leads its shots at detected enemies.",
        "features": ["Obstacle warnings", "Collision recovery", "Predictive fire"],
        "file": "wanderer.py"
    },
    {
        "id": "sentry",
        "name": "Sentry",
        "class_name": "Sentry",
        "description": "Holds position, sweeps its bearing on a timer and fires at anything in range. Sidesteps when hit.",
        "features": ["Timeouts", "Stationary defence"],
        "file": "sentry.py"
    },
]


def get_template_list():
    """
    Get list of available templates.

    Returns:
        list: Template metadata dictionaries
    """
    return TEMPLATES


def get_template(template_id: str) -> dict:
    """
    Get metadata for a template.

    Raises:
        ValueError: If template_id is not found
    """
    template = next((t for t in TEMPLATES if t["id"] == template_id), None)
    if not template:
        raise ValueError(f"Template '{template_id}' not found")
    return template


def get_template_code(template_id: str) -> str:
    """
    Get the source code for a template policy.

    Args:
        template_id: Template identifier (e.g., "wanderer")

    Returns:
        str: Template source code

    Raises:
        ValueError: If template_id is not found
    """
    template = get_template(template_id)

    template_dir = os.path.dirname(__file__)
    template_path = os.path.join(template_dir, template["file"])

    with open(template_path, 'r') as f:
        return f.read()
