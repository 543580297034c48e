"""Declarative data binding and template expansion for lxml HTML documents."""

from domtemplate.conf import BindingConfiguration
from domtemplate.document import HTMLDocument
from domtemplate.exceptions import (
    BoundAttributeDoesNotExist,
    BoundAttributeMissing,
    BoundDataNotSet,
    DomTemplateError,
    DuplicateTemplateName,
    IncorrectTableDataFormat,
    NamelessTemplateSpecificity,
    TableColumnNotFound,
    TableElementNotFound,
    TemplateElementNotFound,
)
from domtemplate.tables.normalizer import TableMatrix, normalize_table_data

__version__ = "0.1.0"

__all__ = [
    "BindingConfiguration",
    "BoundAttributeDoesNotExist",
    "BoundAttributeMissing",
    "BoundDataNotSet",
    "DomTemplateError",
    "DuplicateTemplateName",
    "HTMLDocument",
    "IncorrectTableDataFormat",
    "NamelessTemplateSpecificity",
    "TableColumnNotFound",
    "TableElementNotFound",
    "TableMatrix",
    "TemplateElementNotFound",
    "normalize_table_data",
]
