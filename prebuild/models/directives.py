"""Structured directives handed to the outer build tool."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class LinkMode(Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"


@dataclass(frozen=True)
class RerunIfChanged:
    """Invalidate cached prebuild results when *path* changes."""

    path: str


@dataclass(frozen=True)
class CfgFlag:
    """Configuration flag set on the crate being compiled."""

    name: str


@dataclass(frozen=True)
class LinkSearch:
    path: str
    kind: str = "native"


@dataclass(frozen=True)
class LinkLibrary:
    name: str
    mode: LinkMode = LinkMode.STATIC


Directive = Union[RerunIfChanged, CfgFlag, LinkSearch, LinkLibrary]


@dataclass(frozen=True)
class LinkDirective:
    """Search path + library pair announced after a successful native build."""

    search_path: str
    library_name: str
    link_mode: LinkMode = LinkMode.STATIC

    def expand(self) -> tuple[LinkSearch, LinkLibrary]:
        """Both halves together; one is never emitted without the other."""
        return (
            LinkSearch(path=self.search_path),
            LinkLibrary(name=self.library_name, mode=self.link_mode),
        )
