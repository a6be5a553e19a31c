from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.config import APP_NAME, TEMPLATES_DIR

# Jinja env
_jinja_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)

NETWORK_COLORS = {
    "clickdealer": "#3b82f6",
    "trafee": "#22c55e",
    "adverten": "#a855f7",
}
KIND_COLORS = {
    "lead": "#10b981",
    "click": "#0ea5e9",
}


def network_color(network: str) -> str:
    return NETWORK_COLORS.get(network, "#6b7280")


def kind_color(kind: str) -> str:
    return KIND_COLORS.get(kind, "#0ea5e9")


_jinja_env.globals.update(network_color=network_color, kind_color=kind_color)


def render_page(template_name: str, **context) -> str:
    base = {"app_name": APP_NAME}
    base.update(context or {})
    return _jinja_env.get_template(template_name).render(**base)
