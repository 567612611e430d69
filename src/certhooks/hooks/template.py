"""Jinja2 renderer for hook command lines, stdin and redirect paths.

Placeholders are resolved against :meth:`HookContext.template_fields`.
Handlebars-style ``{{domain}}`` is valid Jinja2, so plain placeholder
templates work unchanged; filters such as ``{{ domains | join(' ') }}``
are available on top.

Unknown fields fail loudly (``StrictUndefined``) instead of rendering
as empty strings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import PurePath
from typing import TYPE_CHECKING, Any

import jinja2
from jinja2 import Environment, StrictUndefined

from certhooks.hooks.errors import TemplateError

if TYPE_CHECKING:
    from certhooks.hooks.context import HookContext


def _finalize(value: Any) -> Any:  # noqa: ANN401
    """Render context values the way shell tools expect them."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(_finalize(v)) for v in value)
    if isinstance(value, PurePath):
        return str(value)
    return value


class TemplateRenderer:
    """Renders hook templates against a context's field view."""

    def __init__(self) -> None:
        self._env = Environment(
            undefined=StrictUndefined,
            autoescape=False,  # noqa: S701
            keep_trailing_newline=True,
            finalize=_finalize,
        )
        self._compile = lru_cache(maxsize=256)(self._env.from_string)

    def render(
        self,
        template: str,
        context: HookContext,
        *,
        hook_name: str | None = None,
    ) -> str:
        """Resolve every placeholder in *template*.

        Parameters
        ----------
        template:
            The template string from the hook definition.
        context:
            The event context supplying field values.
        hook_name:
            Included in the error for diagnostics.

        Raises
        ------
        TemplateError
            On malformed syntax or a reference to an unknown field.

        """
        try:
            return self._compile(template).render(context.template_fields())
        except jinja2.UndefinedError as exc:
            reason = exc.message or "undefined field"
            raise TemplateError(template, reason, hook_name=hook_name) from exc
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateError(
                template,
                f"syntax error at line {exc.lineno}: {exc.message}",
                hook_name=hook_name,
            ) from exc
        except (jinja2.TemplateError, TypeError, ValueError, ArithmeticError) as exc:
            raise TemplateError(template, str(exc), hook_name=hook_name) from exc


_default_renderer = TemplateRenderer()


def render_template(
    template: str,
    context: HookContext,
    *,
    hook_name: str | None = None,
) -> str:
    """Render *template* with the shared module-level renderer."""
    return _default_renderer.render(template, context, hook_name=hook_name)
