"""Clone, style and serialize the live graphic."""
from __future__ import annotations

import copy
import logging
from typing import Optional

from lxml import etree

from ..errors import CaptureError
from ..sinks.registry import DeliverySink
from ..view import XHTML_NS, local_name

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XML_DECLARATION = '<?xml version="1.0" standalone="no"?>\n'

# Hosts that render inline svg inside XHTML leave it in the page's namespace.
_ADOPTED_NAMESPACES = (None, XHTML_NS)


def _svg_tag(element: etree._Element, foreign: bool) -> str:
    qname = etree.QName(element)
    if not foreign and qname.namespace in _ADOPTED_NAMESPACES:
        return f"{{{SVG_NS}}}{qname.localname}"
    return element.tag


def _clone_children(source: etree._Element, target: etree._Element, foreign: bool) -> None:
    for child in source:
        if isinstance(child.tag, str):
            clone = etree.SubElement(target, _svg_tag(child, foreign), dict(child.attrib))
            clone.text = child.text
            # Content of <foreignObject> belongs to its own vocabulary.
            _clone_children(child, clone, foreign or local_name(child) == "foreignObject")
        else:
            clone = copy.deepcopy(child)
            target.append(clone)
        clone.tail = child.tail


def clone_graphic(graphic: etree._Element) -> etree._Element:
    """Return a detached deep copy of ``graphic`` rooted in the SVG namespace.

    The copy shares no nodes with ``graphic``; unqualified (or XHTML) elements
    are re-created in the SVG namespace so the result stands on its own.
    """

    nsmap = {
        prefix: uri
        for prefix, uri in graphic.nsmap.items()
        if prefix is not None and uri not in (SVG_NS, XHTML_NS)
    }
    nsmap[None] = SVG_NS
    root = etree.Element(_svg_tag(graphic, False), dict(graphic.attrib), nsmap=nsmap)
    root.text = graphic.text
    _clone_children(graphic, root, foreign=False)
    etree.cleanup_namespaces(root)
    return root


def take_snapshot(graphic: etree._Element, styles: str) -> etree._Element:
    """Return a detached copy of ``graphic`` with ``styles`` as its first child.

    ``graphic`` itself is never modified.
    """

    if local_name(graphic) != "svg":
        raise CaptureError(f"Expected an <svg> element, found <{local_name(graphic)}>")
    snapshot = clone_graphic(graphic)
    style = etree.Element(f"{{{SVG_NS}}}style")
    try:
        style.text = styles
    except ValueError as exc:
        raise CaptureError(f"Styles cannot be embedded as XML text: {exc}") from exc
    snapshot.insert(0, style)
    return snapshot


def serialize(snapshot: etree._Element, *, declaration: bool = False) -> str:
    """Serialize ``snapshot`` and check that the result is well-formed XML."""

    try:
        text = etree.tostring(snapshot, encoding="unicode", with_tail=False)
        etree.fromstring(text.encode("utf-8"))
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise CaptureError(f"Snapshot serialized to malformed markup: {exc}") from exc
    return XML_DECLARATION + text if declaration else text


def build_snapshot(
    graphic: Optional[etree._Element],
    styles: str,
    sink: DeliverySink,
    *,
    declaration: Optional[bool] = None,
) -> str:
    """Produce a standalone SVG document from ``graphic`` and hand it to ``sink``.

    Parameters
    ----------
    graphic:
        The live ``<svg>`` element.  ``None`` means the locator matched
        nothing and raises :class:`CaptureError`.
    styles:
        CSS text to embed.
    sink:
        Destination for the finished document; only invoked on success.
    declaration:
        Whether to prefix the XML declaration.  ``None`` defers to
        ``sink.standalone``.
    """

    if graphic is None:
        raise CaptureError("Graphic element not found")
    if declaration is None:
        declaration = bool(getattr(sink, "standalone", False))
    document = serialize(take_snapshot(graphic, styles), declaration=declaration)
    logger.debug("Captured %d characters of SVG", len(document))
    sink.deliver(document)
    return document


__all__ = ["SVG_NS", "XML_DECLARATION", "build_snapshot", "clone_graphic", "serialize", "take_snapshot"]
