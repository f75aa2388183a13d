"""Commit attribution: reachability, PR resolution, merging and note writing."""

from prlabel.labeler.schemas import (
	AnnotationRecord,
	CommitId,
	CommitNode,
	Label,
	PullRequest,
	RefSpec,
	RunSummary,
	SpecResolution,
	WritePlan,
	WriteReport,
	make_label,
)

__all__ = [
	"AnnotationRecord",
	"CommitId",
	"CommitNode",
	"Label",
	"PullRequest",
	"RefSpec",
	"RunSummary",
	"SpecResolution",
	"WritePlan",
	"WriteReport",
	"make_label",
]
