"""Jinja2 template utilities for LLM components."""

from jinja2 import Environment, PackageLoader, select_autoescape

from preekbot.domain.entities import Member


def create_jinja_env() -> Environment:
    """Create Jinja2 environment for LLM templates.

    Creates a configured Jinja2 environment that loads templates from
    the preekbot.infrastructure.llm.templates package.

    Returns:
        Configured Jinja2 environment.
    """
    return Environment(
        loader=PackageLoader("preekbot.infrastructure.llm", "templates"),
        autoescape=select_autoescape(),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_instructions(env: Environment, member: Member) -> str:
    """Render the assistant instructions for a member.

    The tone suffix depends on the member's target group.

    Args:
        env: Jinja2 environment.
        member: Member the conversation belongs to.

    Returns:
        Instructions text.
    """
    template = env.get_template("instructions.j2")
    return template.render(
        first_name=member.first_name,
        target_group=member.target_group.value if member.target_group else None,
    ).strip()
