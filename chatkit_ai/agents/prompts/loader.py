"""
Prompt rendering for agents.

Templates ship as package data (templates/*.jinja2) and are read through the
package loader, so rendering works from a source checkout and from an
installed wheel alike. Every name declared on Template is checked once at
import; a missing file is a deployment bug and stops startup.
"""

from functools import lru_cache
from typing import Iterable, List

from jinja2 import Environment, PackageLoader, TemplateNotFound

from .templates import Template
from ...exceptions import ConfigurationError

TEMPLATE_PACKAGE = "chatkit_ai.agents.prompts"
TEMPLATE_SUFFIX = ".jinja2"


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    # Prompts are plain text for the model, never HTML
    return Environment(
        loader=PackageLoader(TEMPLATE_PACKAGE, "templates"),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def declared_templates() -> List[str]:
    return [
        value
        for name, value in vars(Template).items()
        if not name.startswith("_") and isinstance(value, str)
    ]


def check_templates(names: Iterable[str]) -> None:
    """Raises ConfigurationError listing every template that cannot be loaded."""
    env = get_environment()
    missing = []
    for name in names:
        try:
            env.get_template(f"{name}{TEMPLATE_SUFFIX}")
        except TemplateNotFound:
            missing.append(name)
    if missing:
        raise ConfigurationError(f"Prompt templates missing: {', '.join(missing)}")


check_templates(declared_templates())


def render(template_name: str, **context) -> str:
    return get_environment().get_template(f"{template_name}{TEMPLATE_SUFFIX}").render(**context)
