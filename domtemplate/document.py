"""HTML documents with template extraction and data binding."""

from __future__ import annotations

# Standard Libraries
import logging
from copy import deepcopy
from typing import Any, Optional

# 3rd Party Libraries
from lxml import html as lxml_html

# DomTemplate Libraries
from domtemplate.binding.binder import ElementBinder
from domtemplate.conf import BindingConfiguration
from domtemplate.templates.fragment import TemplateFragment
from domtemplate.templates.registry import TemplateRegistry

logger = logging.getLogger(__name__)

EMPTY_DOCUMENT = "<!DOCTYPE html><html><head></head><body></body></html>"


class HTMLDocument:
    """A parsed HTML document ready for data binding.

    Templates (elements carrying ``data-template``) are detached from the
    tree as soon as the document is parsed and live in :attr:`templates`
    until a list or table binding clones them back in.

    **Example**

        document = HTMLDocument("<ul><li data-template data-bind:text></li></ul>")
        document.bind_list(["one", "two"])
        str(document)  # ...<ul><li>one</li><li>two</li></ul>...
    """

    def __init__(self, markup: str = "", config: Optional[BindingConfiguration] = None):
        self.config = config or BindingConfiguration.get_solo()
        source = markup if markup and markup.strip() else EMPTY_DOCUMENT
        parser = lxml_html.HTMLParser(default_doctype=False)
        self._root = lxml_html.document_fromstring(source, parser=parser, ensure_head_body=True)

        self.templates = TemplateRegistry(self.config)
        self.templates.extract_all(self._root)
        self.binder = ElementBinder(self._root, self.templates, self.config)
        logger.debug("Parsed document with %s templates", len(self.templates))

    @property
    def root(self):
        return self._root

    @property
    def head(self):
        return self._root.find("head")

    @property
    def body(self):
        return self._root.find("body")

    def query(self, xpath: str, context=None, **variables) -> list:
        """Evaluate ``xpath`` against ``context`` (the root by default)."""

        element = self._root if context is None else context
        return element.xpath(xpath, **variables)

    def get_template(self, name: str) -> Optional[TemplateFragment]:
        return self.templates.resolve_named(name)

    def bind_key_value(self, key: str, value: Any, context=None) -> list[str]:
        return self.binder.bind_key_value(key, value, context)

    def bind_data(self, data: Any, context=None) -> list[str]:
        return self.binder.bind_data(data, context)

    def bind_value(self, value: Any, context=None) -> list[str]:
        return self.binder.bind_value(value, context)

    def bind_list(self, rows: Any, template_name: Optional[str] = None, context=None) -> list:
        return self.binder.bind_list(rows, template_name, context)

    def bind_table(self, data: Any, context=None, key: Optional[str] = None):
        return self.binder.bind_table(data, context, key)

    def validate_binds(self, context=None) -> None:
        self.binder.validate_binds(context)

    def apply_defaults(self, context=None) -> int:
        return self.binder.apply_defaults(context)

    def remove_binds(self, context=None) -> int:
        return self.binder.remove_binds(context)

    def serialize(self) -> str:
        """Return the document as HTML.

        Unresolved placeholder defaults are rendered into a copy, so the
        document itself can still be bound afterwards.
        """

        tree = self._root.getroottree()
        if self.binder.pending_defaults():
            tree = deepcopy(tree)
            self.binder.apply_defaults(tree.getroot())
        return lxml_html.tostring(tree, encoding="unicode", method="html")

    def __str__(self) -> str:
        return self.serialize()

    def __repr__(self) -> str:
        return f"<HTMLDocument templates={len(self.templates)}>"
