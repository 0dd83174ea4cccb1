"""
To properly manipulate labels, we need to know which labels are controlled
by which authority. This is that information.
"""

from typing import Dict, Iterable

# These are labels that correspond to Tracker story states.  Only one of them
# should be used at a time, and the synchronizer removes them when they no
# longer apply.

LABEL_UNSCHEDULED = "unscheduled"
LABEL_SCHEDULED = "scheduled"
LABEL_IN_FLIGHT = "in-flight"

STORY_STATE_LABELS: Dict[str, str] = {
    LABEL_UNSCHEDULED: "e4eff7",
    LABEL_SCHEDULED: "f4f4f4",
    LABEL_IN_FLIGHT: "f3f3d1",
}

# These are labels people put on issues.  The synchronizer makes sure they
# exist, and adds the type labels, but never removes them.

LABEL_BUG = "bug"
LABEL_ENHANCEMENT = "enhancement"
LABEL_PROPOSAL = "proposal"

ISSUE_ONLY_LABELS: Dict[str, str] = {
    LABEL_PROPOSAL: "c2e0c6",

    # An empty color means: respect the color already on GitHub.
    LABEL_BUG: "",
    LABEL_ENHANCEMENT: "",
}

# The Tracker label put on stories whose issue has a pull request.
HAS_PR_LABEL = "has-pr"


def stock_labels(additional: Dict[str, str] | None = None) -> Dict[str, str]:
    """
    All the labels a repo should have, mapped to their canonical colors.

    `additional` labels are included, and win over the built-in colors.
    """
    labels = dict(STORY_STATE_LABELS)
    labels.update(ISSUE_ONLY_LABELS)
    labels.update(additional or {})
    return labels


def normalize_color(color: str) -> str:
    return color.strip().lstrip("#").lower()


def parse_label_declarations(declarations: Iterable[str]) -> Dict[str, str]:
    """
    Parse "NAME:COLOR" label declarations into a dict.

    The color is optional: "NAME" or "NAME:" keeps whatever color the label
    already has.  Names can contain colons, the color is after the last one.

    """
    labels = {}
    for decl in declarations:
        name, sep, color = decl.rpartition(":")
        if not sep:
            name, color = color, ""
        name = name.strip()
        if not name:
            raise ValueError(f"Label declaration has no name: {decl!r}")
        labels[name] = normalize_color(color)
    return labels
