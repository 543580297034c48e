"""Exceptions raised while binding data into a document."""

from __future__ import annotations


class DomTemplateError(Exception):
    """Base class for every binding and templating failure."""


class BoundAttributeDoesNotExist(DomTemplateError):
    """An ``@`` key names an attribute the element does not carry."""

    def __init__(self, directive: str, attribute: str):
        self.directive = directive
        self.attribute = attribute
        super().__init__(
            f'Directive "{directive}" reads its key from the "{attribute}" attribute, '
            "which does not exist on the element"
        )


BoundAttributeMissing = BoundAttributeDoesNotExist


class BoundDataNotSet(DomTemplateError):
    """Validation found required directives that were never satisfied."""

    def __init__(self, directives: list[tuple[str, str]]):
        self.directives = directives
        listed = ", ".join(f'{name}="{value}"' for name, value in directives)
        super().__init__(f"Bound data was never set for: {listed}")


class NamelessTemplateSpecificity(DomTemplateError):
    """More than one unnamed template matches the binding context."""

    def __init__(self, path: str, matches: list[str]):
        self.path = path
        self.matches = matches
        super().__init__(
            f"{len(matches)} unnamed templates match {path or '<scope root>'}; "
            "name the templates or bind from a more specific element"
        )


class TemplateElementNotFound(DomTemplateError):
    """No template could be resolved for a list binding."""


class DuplicateTemplateName(DomTemplateError):
    """Two template markers share the same explicit name."""


class TableElementNotFound(DomTemplateError):
    """The binding context contains no ``<table>`` element."""


class IncorrectTableDataFormat(DomTemplateError):
    """Table data is not in one of the accepted shapes."""


class TableColumnNotFound(IncorrectTableDataFormat):
    """A keyed table value names a column missing from the header row."""

    def __init__(self, key: str, headers: list[str]):
        self.key = key
        self.headers = headers
        super().__init__(f'Column "{key}" is not one of the table headers {headers!r}')
