# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from jinja2 import Environment, PackageLoader, StrictUndefined


class TemplateRenderer:
    """Renders the node files shipped under scyllanode/db/templates."""

    def __init__(self):
        self.env = Environment(
            loader=PackageLoader("scyllanode.db", "templates"),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    def render(self, template_name: str, context: dict) -> str:
        tmpl = self.env.get_template(template_name)
        return tmpl.render(**context)
