"""Detached template content and the anchor used to put copies back."""

from __future__ import annotations

# Standard Libraries
from copy import deepcopy
from dataclasses import dataclass, field, replace

# DomTemplate Libraries
from domtemplate.dom import iter_child_elements


@dataclass(frozen=True)
class Anchor:
    """Where a template originally sat.

    ``parent_path`` is the structural path of the original parent, relative
    to the enclosing template's container for nested templates and absolute
    otherwise. ``trailing`` counts the parent's child nodes that followed
    the template, so copies go in front of them.
    """

    parent_path: str
    trailing: int = 0


@dataclass
class TemplateFragment:
    """Template content held in a detached ``<template>`` container."""

    identifier: int
    container: object
    tag: str
    anchor: Anchor
    name: str | None = None
    scope: int | None = None
    is_clone: bool = field(default=False, compare=False)

    @property
    def path(self) -> str:
        """The structural path the template was extracted from."""

        return f"{self.anchor.parent_path}/{self.tag}"

    @property
    def key(self) -> str:
        return self.name or self.path

    @property
    def elements(self) -> list:
        return list(iter_child_elements(self.container))

    def clone(self) -> "TemplateFragment":
        return replace(self, container=deepcopy(self.container), is_clone=True)

    def __repr__(self) -> str:
        return f"<TemplateFragment {self.key!r} #{self.identifier}>"
