"""Apply the dialect's bundled XSLT stylesheet in memory."""

from __future__ import annotations

from importlib import resources
from importlib.resources.abc import Traversable

from lxml import etree

from .dialects import Dialect, resolve_dialect
from .exceptions import TransformError


STYLESHEET_PACKAGE = "step_osis.stylesheets"


def _stylesheet_resource(name: str) -> Traversable:
    return resources.files(STYLESHEET_PACKAGE) / name


class PackageResolver(etree.Resolver):
    """Serve ``xsl:include``/``xsl:import`` targets from the bundled stylesheets."""

    def resolve(self, system_url, public_id, context):  # noqa: ANN001
        if not system_url:
            return None
        name = system_url.replace("\\", "/").rsplit("/", 1)[-1]
        resource = _stylesheet_resource(name)
        if not resource.is_file():
            return None
        return self.resolve_string(resource.read_bytes(), context, base_url=name)


def _format_log(error_log: etree._ListErrorLog) -> str:
    lines = [f"line {entry.line}: {entry.message}" for entry in error_log if entry.message]
    return "; ".join(lines[-3:])


def load_stylesheet(dialect: Dialect | str) -> etree.XSLT:
    """Compile the stylesheet bundled for ``dialect``."""
    resolved = resolve_dialect(dialect)
    resource = _stylesheet_resource(resolved.stylesheet)
    if not resource.is_file():
        raise TransformError(f"Stylesheet '{resolved.stylesheet}' is not bundled with step-osis.")

    parser = etree.XMLParser()
    parser.resolvers.add(PackageResolver())
    try:
        stylesheet = etree.fromstring(resource.read_bytes(), parser, base_url=resolved.stylesheet)
    except etree.XMLSyntaxError as exc:
        raise TransformError(f"Stylesheet '{resolved.stylesheet}' is not well-formed: {exc}") from exc

    try:
        return etree.XSLT(stylesheet)
    except etree.XSLTParseError as exc:
        detail = _format_log(exc.error_log) or str(exc)
        raise TransformError(f"Stylesheet '{resolved.stylesheet}' is invalid: {detail}") from exc


def apply_stylesheet(
    document: etree._ElementTree,
    dialect: Dialect | str,
    *,
    work: str | None = None,
    transform: etree.XSLT | None = None,
) -> etree._ElementTree:
    """Transform ``document`` and return the new, in-memory result tree.

    ``work`` overrides the OSIS work identifier written by the stylesheet.
    """
    transform = transform if transform is not None else load_stylesheet(dialect)
    params: dict[str, object] = {}
    if work:
        params["work"] = etree.XSLT.strparam(work)

    try:
        result = transform(document, **params)
    except etree.XSLTApplyError as exc:
        detail = _format_log(transform.error_log) or str(exc)
        raise TransformError(f"Transform failed: {detail}") from exc

    if result.getroot() is None:
        raise TransformError("Transform produced an empty document.")
    return result


__all__ = ["PackageResolver", "apply_stylesheet", "load_stylesheet"]
