"""Jinja2 template rendering for generated sources."""

from __future__ import annotations

from pathlib import Path

import jinja2

from imortal.application.codegen.naming import to_pascal_case, to_snake_case, to_table_name
from imortal.domain.exceptions import TemplateRenderError

TEMPLATES_DIR = Path(__file__).parent / "templates"


class TemplateRenderer:
    """Renders the bundled ``*.j2`` templates with strict undefined checks."""

    def __init__(self, directory: Path | None = None) -> None:
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(directory or TEMPLATES_DIR)),
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,
        )
        self._env.filters["snake"] = to_snake_case
        self._env.filters["pascal"] = to_pascal_case
        self._env.filters["table"] = to_table_name
        self._env.filters["pyrepr"] = repr

    def render(self, template: str, **values: object) -> str:
        try:
            return self._env.get_template(template).render(**values)
        except jinja2.TemplateError as exc:
            raise TemplateRenderError(
                f"Failed to render '{template}': {exc}",
                {"template": template},
            ) from exc
