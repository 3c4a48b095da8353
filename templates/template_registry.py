import os
import jinja2
from typing import Optional, Dict, Any

WATERFALL_TEMPLATE = 'waterfall'


class TemplateRegistry:
    def __init__(self, user_template_path: Optional[str] = None):
        """
        Initialize the Jinja2 environment and register templates.
        :param user_template_path: Optional path to a template replacing the built-in waterfall
        """
        self.templates = {}
        self.jinja_env = self._create_jinja_environment(user_template_path)
        self._register_built_in_templates()
        if user_template_path:
            self.register_template(WATERFALL_TEMPLATE, os.path.basename(user_template_path))

    def _create_jinja_environment(self, user_template_path: Optional[str] = None) -> jinja2.Environment:
        """
        Set up the Jinja2 environment with built-in and user-defined paths.
        """
        search_paths = []
        if user_template_path:
            search_paths.append(os.path.dirname(os.path.abspath(user_template_path)))
        search_paths.append(os.path.join(os.path.dirname(__file__), 'waterfall'))

        env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(search_paths),
            autoescape=jinja2.select_autoescape(['html', 'xml', 'svg', 'jinja2']),
            trim_blocks=True,
            lstrip_blocks=True
        )

        env.filters['px'] = lambda val: f"{val:.2f}".rstrip('0').rstrip('.') if isinstance(val, (int, float)) else val
        env.filters['ms'] = lambda val: f"{val:.0f}ms" if isinstance(val, (int, float)) else val

        return env

    def _register_built_in_templates(self):
        self.register_template(WATERFALL_TEMPLATE, 'waterfall.html.jinja2')

    def register_template(self, name: str, template_path: str):
        """
        Register a template path under a unique name.
        :param name: Unique name to identify this template
        :param template_path: Path relative to the template search paths
        """
        self.templates[name] = template_path

    def get_template(self, name: str) -> jinja2.Template:
        """
        Retrieve a Jinja2 template by registered name.
        :raises ValueError: If the template name is not found
        """
        if name not in self.templates:
            raise ValueError(f"Template '{name}' not registered")
        return self.jinja_env.get_template(self.templates[name])

    def render_template(self, name: str, context: Optional[Dict[str, Any]] = None) -> str:
        template = self.get_template(name)
        return template.render(**(context or {}))
