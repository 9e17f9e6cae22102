"""Result records produced by the extraction/reconciliation engine."""

from __future__ import annotations

from pydantic import BaseModel, Field

from pinwise.models.allocation import AllocationMap, CandidateAllocation, Tier


class DroppedEntry(BaseModel):
    """A tool entry or block line that could not be turned into a candidate."""

    tier: Tier
    raw: str = ""
    reason: str = ""


class ExtractionResult(BaseModel):
    """Output of the tiered extractor.

    ``tier`` is the tier that produced the candidates, or *None* when no
    tier produced anything (an empty extraction: no change this turn).
    ``block_present`` records an explicit-but-empty allocation block.
    """

    candidates: list[CandidateAllocation] = Field(default_factory=list)
    tier: Tier | None = None
    block_present: bool = False
    dropped: list[DroppedEntry] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.candidates


class ConflictDropped(BaseModel):
    """A candidate dropped because its pin already belongs to another device."""

    pin: str
    requested_device: str | None = None
    requested_function: str = ""
    held_by: str | None = None


class ChangeSummary(BaseModel):
    """What a reconciliation did to the allocation map."""

    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    unchanged: list[str] = Field(default_factory=list)
    reassigned: list[str] = Field(default_factory=list)
    conflicts: list[ConflictDropped] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed or self.updated)


class ReconcileResult(BaseModel):
    """New allocation map plus the change summary."""

    allocations: AllocationMap = Field(default_factory=dict)
    summary: ChangeSummary = Field(default_factory=ChangeSummary)


class IncompleteWarning(BaseModel):
    """A multi-pin device with only partial role coverage."""

    device: str
    interface: str
    missing_roles: list[str] = Field(default_factory=list)
    present_roles: list[str] = Field(default_factory=list)

    @property
    def message(self) -> str:
        missing = ", ".join(self.missing_roles)
        if not self.present_roles:
            return f"{self.device} ({self.interface}) has no {missing} allocated."
        present = ", ".join(self.present_roles)
        return (
            f"{self.device} ({self.interface}) only has {present} allocated; "
            f"missing {missing}."
        )
