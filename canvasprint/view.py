"""Read-mostly access to the host's rendered page."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from lxml import etree

XHTML_NS = "http://www.w3.org/1999/xhtml"


def local_name(element: etree._Element) -> str:
    """Return the tag of ``element`` without its namespace."""

    return etree.QName(element).localname


@dataclass
class LiveView:
    """Lightweight wrapper around the page tree owned by the UI layer.

    The view only performs lookups.  The single exception is
    :meth:`attach_transient`, used by the download sink to host its
    short-lived anchor element.
    """

    root: etree._Element

    @classmethod
    def from_string(cls, markup: str | bytes) -> "LiveView":
        """Parse an XHTML page from ``markup``."""

        if isinstance(markup, str):
            markup = markup.encode("utf-8")
        return cls(root=etree.fromstring(markup))

    @classmethod
    def from_path(cls, path: str | Path) -> "LiveView":
        """Parse the XHTML page stored at ``path``."""

        return cls(root=etree.parse(str(path)).getroot())

    def find_by_id(self, element_id: str) -> Optional[etree._Element]:
        """Return the first element whose ``id`` equals ``element_id``."""

        matches = self.root.xpath("//*[@id=$value]", value=element_id)
        return matches[0] if matches else None

    def count_by_id(self, element_id: str) -> int:
        return int(self.root.xpath("count(//*[@id=$value])", value=element_id))

    def first_style(self) -> Optional[etree._Element]:
        """Return the first ``<style>`` element in document order."""

        matches = self.root.xpath("//*[local-name()='style']")
        return matches[0] if matches else None

    def first_stylesheet_link(self) -> Optional[etree._Element]:
        """Return the first ``<link>`` whose ``rel`` contains ``stylesheet``."""

        for link in self.root.xpath("//*[local-name()='link'][@rel]"):
            tokens = link.get("rel", "").lower().split()
            if "stylesheet" in tokens:
                return link
        return None

    def body(self) -> etree._Element:
        matches = self.root.xpath("//*[local-name()='body']")
        return matches[0] if matches else self.root

    def attach_transient(self, tag: str, attributes: dict[str, str]) -> etree._Element:
        """Append a new element named ``tag`` to the page body and return it."""

        body = self.body()
        namespace = etree.QName(body).namespace
        qualified = f"{{{namespace}}}{tag}" if namespace else tag
        return etree.SubElement(body, qualified, attributes)

    @staticmethod
    def detach(element: etree._Element) -> None:
        """Remove ``element`` from its parent, keeping the parent's text flow."""

        parent = element.getparent()
        if parent is None:
            return
        tail = element.tail
        previous = element.getprevious()
        parent.remove(element)
        if tail:
            if previous is not None:
                previous.tail = (previous.tail or "") + tail
            else:
                parent.text = (parent.text or "") + tail

    @staticmethod
    def serialize(element: etree._Element) -> bytes:
        """Return the canonical byte form of ``element`` for comparisons."""

        return etree.tostring(element, with_tail=False)


__all__ = ["LiveView", "XHTML_NS", "local_name"]
