"""Vigilfile scaffolding used by ``vigil init``.

* :func:`create_vigilfile` -- copy the bundled starter Vigilfile into the
  current directory.
* :func:`initialize_template` -- append one plugin's snippet to the
  Vigilfile. The snippet comes from the installed plugin (its own
  :meth:`~vigil.plugins.base.Plugin.init`) or, failing that, from a user
  template ``<config_dir>/templates/<identifier>``.
* :func:`initialize_all_templates` -- the above for every installed plugin.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from vigil.config import VIGILFILE_NAME, get_templates_dir
from vigil.exceptions import TemplateNotFoundError, VigilfileExistsError
from vigil.output import error, info
from vigil.plugins.resolver import PluginResolver, canonical_name, module_name

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


def append_snippet(vigilfile: Path, snippet: str) -> None:
    """Append *snippet* to *vigilfile*, separated by one blank line."""
    content = vigilfile.read_text(encoding="utf-8") if vigilfile.exists() else ""
    parts = [content.rstrip("\n"), snippet.strip("\n")]
    vigilfile.write_text("\n\n".join(p for p in parts if p) + "\n", encoding="utf-8")


def create_vigilfile(abort_on_existence: bool = False, path: Optional[Path] = None) -> Path:
    """Write the starter Vigilfile to *path* (default ``./Vigilfile``).

    An existing file is left alone. With *abort_on_existence* that is
    reported and raised instead.

    Raises:
        VigilfileExistsError: If the file exists and *abort_on_existence*
            is set.
    """
    path = path or Path.cwd() / VIGILFILE_NAME
    if path.exists():
        if abort_on_existence:
            message = f"{VIGILFILE_NAME} already exists at {path}"
            error(message)
            raise VigilfileExistsError(message)
        logger.debug("%s already exists at %s, leaving it alone", VIGILFILE_NAME, path)
        return path

    shutil.copyfile(TEMPLATE_DIR / VIGILFILE_NAME, path)
    info(f"Writing new {VIGILFILE_NAME} to {path}")
    return path


def _user_template(identifier: str) -> Path:
    return get_templates_dir() / identifier


def initialize_template(
    identifier: str,
    resolver: Optional[PluginResolver] = None,
    vigilfile: Optional[Path] = None,
) -> bool:
    """Append the snippet for *identifier* to the Vigilfile.

    Returns:
        ``True`` if a plugin or user template handled the request.
    """
    resolver = resolver or PluginResolver()
    vigilfile = vigilfile or Path.cwd() / VIGILFILE_NAME
    try:
        plugin_cls = resolver.resolve(identifier, fail_silently=True)
        if plugin_cls is not None:
            plugin_cls.init(identifier, vigilfile)
            return True

        template = _user_template(identifier)
        if template.is_file():
            append_snippet(vigilfile, template.read_text(encoding="utf-8"))
            info(f"{identifier} template added to {VIGILFILE_NAME}, feel free to edit it")
            return True

        raise TemplateNotFoundError(
            f"Could not load '{module_name(identifier)}' or "
            f"'{template}' or find class {canonical_name(identifier)}"
        )
    except TemplateNotFoundError as exc:
        error(str(exc))
        return False


def initialize_all_templates(
    resolver: Optional[PluginResolver] = None,
    vigilfile: Optional[Path] = None,
) -> list[str]:
    """Append the snippet of every installed plugin.

    Returns:
        The identifiers that were handled.
    """
    resolver = resolver or PluginResolver()
    return [
        name
        for name in resolver.plugin_package_names()
        if initialize_template(name, resolver, vigilfile)
    ]
