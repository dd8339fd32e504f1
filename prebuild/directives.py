"""Directive collection and rendering to the Cargo build-script protocol."""

from __future__ import annotations

from typing import TextIO

from prebuild.models.directives import (
    CfgFlag,
    Directive,
    LinkDirective,
    LinkLibrary,
    LinkMode,
    LinkSearch,
    RerunIfChanged,
)

# Cargo spells dynamic linkage "dylib"
_LINK_KIND = {LinkMode.STATIC: "static", LinkMode.DYNAMIC: "dylib"}


def render_cargo(directive: Directive) -> str:
    """Render one directive as a ``cargo:`` instruction line (no newline)."""
    if isinstance(directive, RerunIfChanged):
        return f"cargo:rerun-if-changed={directive.path}"
    if isinstance(directive, CfgFlag):
        return f"cargo:rustc-cfg={directive.name}"
    if isinstance(directive, LinkSearch):
        return f"cargo:rustc-link-search={directive.kind}={directive.path}"
    if isinstance(directive, LinkLibrary):
        return f"cargo:rustc-link-lib={_LINK_KIND[directive.mode]}={directive.name}"
    raise TypeError(f"Unknown directive type: {type(directive).__name__}")


class DirectiveSink:
    """Ordered collection of directives for the outer build."""

    def __init__(self) -> None:
        self.directives: list[Directive] = []

    def add(self, directive: Directive) -> None:
        self.directives.append(directive)

    def extend(self, directives: list[Directive]) -> None:
        self.directives.extend(directives)

    def announce_link(self, link: LinkDirective) -> None:
        self.directives.extend(link.expand())

    def of_type(self, kind: type) -> list[Directive]:
        return [d for d in self.directives if isinstance(d, kind)]

    def render(self) -> list[str]:
        return [render_cargo(d) for d in self.directives]

    def emit_to(self, stream: TextIO) -> None:
        """Write one rendered line per directive to *stream*."""
        for line in self.render():
            stream.write(line + "\n")
        stream.flush()
