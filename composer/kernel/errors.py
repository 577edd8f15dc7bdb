"""
Composer Kernel: Failure Taxonomy

Every failure the kernel can surface, by stage:

  ParseFailure      malformed property/style text (always recovered locally)
  TransformFailure  source does not conform to the component dialect
  RuntimeFailure    evaluated author logic threw (caught inside the sandbox)
  AddressingSkip    deferred addressing pass found its target gone
  ResolutionFailure no page could be resolved for a document
"""

from __future__ import annotations


class ComponentFailure(Exception):
    """Base class. `detail` is what the disclosable error panel shows."""

    stage = "unknown"

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or message

    def to_dict(self) -> dict[str, str]:
        return {"stage": self.stage, "message": self.message, "detail": self.detail}


class ParseFailure(ComponentFailure):
    """Property or style literal text could not be parsed by any pass."""

    stage = "parse"


class TransformFailure(ComponentFailure):
    """Component source could not be turned into an executable program."""

    stage = "transform"


class RuntimeFailure(ComponentFailure):
    """Author logic raised while being evaluated."""

    stage = "runtime"


class BudgetExceeded(RuntimeFailure):
    """Evaluation ran past its step budget. Not catchable by author code."""


class AddressingSkip(ComponentFailure):
    """The component targeted by a deferred addressing pass no longer exists."""

    stage = "addressing"


class ResolutionFailure(ComponentFailure):
    """No page could be resolved."""

    stage = "resolution"


class PageNotFound(ResolutionFailure):
    """The document has no pages to resolve."""
