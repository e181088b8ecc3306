"""
Module: discovery.classifier

Purpose:
    Decide per node whether a subtree is an icon, and how confident that
    decision is. Each node kind has its own heuristic; classification
    dispatches once on the kind through a table of per-kind functions.

    Masters and instances use an additive score (accept at score >=
    ``min_score``) after hard rejections. Frames and loose shapes use a
    conjunctive gate because they are far more numerous and noisy.

Key Classes:
    - Classification: Decision with score and reasons

Key Functions:
    - classify: Classify one node snapshot

Dependencies:
    - icon_toolkit.common.thresholds: ClassifierThresholds
    - icon_toolkit.common.naming: Vocabularies and name signals

Used By:
    - icon_toolkit.discovery.pipeline
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from icon_toolkit.common.naming import (
    COMPONENT_UI_WORDS,
    INSTANCE_UI_WORDS,
    contains_any,
    has_icon_name,
    is_icon_library_name,
)
from icon_toolkit.common.thresholds import CLASSIFIER_THRESHOLDS, ClassifierThresholds, in_band
from icon_toolkit.core.models import NodeKind, NodeSnapshot
from icon_toolkit.core.models.nodes import SHAPE_KINDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    """
    Result of classifying one node.

    Attributes:
        is_icon: Accept/reject decision
        score: Confidence score (0 for gate-based kinds that reject)
        reasons: Short labels of the rules that fired, for DEBUG logs
    """
    is_icon: bool
    score: int = 0
    reasons: Tuple[str, ...] = ()

    @classmethod
    def reject(cls, reason: str) -> Classification:
        return cls(False, 0, (reason,))

    def __bool__(self) -> bool:
        return self.is_icon


ChildKinds = Sequence[NodeKind]
KindRule = Callable[[NodeSnapshot, Sequence[NodeSnapshot], ChildKinds, ClassifierThresholds], Classification]


def _aspect(node: NodeSnapshot) -> Optional[float]:
    return node.bounding_box.aspect_ratio if node.bounding_box else None


# ─────────────────────────────────────────────────────────────────────────────
# Per-kind rules
# ─────────────────────────────────────────────────────────────────────────────

def _classify_master(
    node: NodeSnapshot,
    ancestors: Sequence[NodeSnapshot],
    child_kinds: ChildKinds,
    t: ClassifierThresholds,
) -> Classification:
    if contains_any(node.name, COMPONENT_UI_WORDS):
        return Classification.reject("ui-component-name")

    box = node.bounding_box
    max_side = box.max_side
    aspect = box.aspect_ratio
    if max_side > t.component_max_size:
        return Classification.reject("too-large")
    if aspect < t.component_aspect_limits[0] or aspect > t.component_aspect_limits[1]:
        return Classification.reject("extreme-aspect")

    if node.kind == NodeKind.COMPONENT_SET:
        return Classification(True, 1, ("component-set",))

    score = 0
    reasons = []
    if has_icon_name(node.name):
        score += 3
        reasons.append("icon-name")
    if in_band(max_side, t.component_good_size):
        score += 2
        reasons.append("good-size")
    elif in_band(max_side, t.component_ok_size):
        score += 1
        reasons.append("ok-size")
    if in_band(aspect, t.component_aspect_band):
        score += 1
        reasons.append("aspect")
    if any(kind in SHAPE_KINDS for kind in child_kinds):
        score += 1
        reasons.append("vector-content")
    if t.is_canonical_size(max_side):
        score += 1
        reasons.append("canonical-size")
    if in_band(aspect, t.square_band):
        score += 1
        reasons.append("square")
    return Classification(score >= t.min_score, score, tuple(reasons))


def _classify_instance(
    node: NodeSnapshot,
    ancestors: Sequence[NodeSnapshot],
    child_kinds: ChildKinds,
    t: ClassifierThresholds,
) -> Classification:
    name = node.name
    if contains_any(name, INSTANCE_UI_WORDS):
        return Classification.reject("ui-component-name")

    box = node.bounding_box
    max_side = box.max_side
    aspect = box.aspect_ratio
    icon_name = has_icon_name(name)
    library = is_icon_library_name(name)

    if max_side > t.instance_max_size and not (icon_name or library):
        return Classification.reject("too-large")
    if max_side > t.instance_hard_max_size and not library:
        return Classification.reject("too-large")

    band = t.instance_named_aspect if icon_name else t.instance_unnamed_aspect
    if not in_band(aspect, band):
        return Classification.reject("aspect")

    score = 0
    reasons = []
    if icon_name:
        score += 3
        reasons.append("icon-name")
    if library:
        score += 2
        reasons.append("icon-library")
    if in_band(aspect, t.square_band):
        score += 2
        reasons.append("square")
    if t.is_canonical_box(box.width, box.height):
        score += 2
        reasons.append("canonical-size")
    if max_side <= t.instance_small_size:
        score += 1
        reasons.append("small")
    if max_side <= t.instance_tiny_size:
        score += 1
        reasons.append("tiny")
    return Classification(score >= t.min_score, score, tuple(reasons))


def _classify_frame(
    node: NodeSnapshot,
    ancestors: Sequence[NodeSnapshot],
    child_kinds: ChildKinds,
    t: ClassifierThresholds,
) -> Classification:
    box = node.bounding_box
    if not in_band(box.aspect_ratio, t.frame_aspect):
        return Classification.reject("aspect")
    if not t.is_canonical_box(box.width, box.height):
        return Classification.reject("non-canonical-size")
    if not any(kind in SHAPE_KINDS for kind in child_kinds):
        return Classification.reject("no-vector-content")
    if len(child_kinds) > t.frame_max_children:
        return Classification.reject("too-many-children")
    return Classification(True, 1, ("frame-icon",))


def _classify_shape(
    node: NodeSnapshot,
    ancestors: Sequence[NodeSnapshot],
    child_kinds: ChildKinds,
    t: ClassifierThresholds,
) -> Classification:
    # An icon-sized frame above this shape is the real icon
    for ancestor in ancestors:
        if ancestor.kind != NodeKind.FRAME or ancestor.bounding_box is None:
            continue
        ratio = ancestor.bounding_box.aspect_ratio
        if (
            ratio is not None
            and in_band(ratio, t.ancestor_frame_aspect)
            and ancestor.bounding_box.max_side <= t.ancestor_frame_max_size
        ):
            return Classification.reject("inside-icon-frame")

    box = node.bounding_box
    if not in_band(box.max_side, t.shape_size):
        return Classification.reject("size")
    if not in_band(box.aspect_ratio, t.shape_aspect):
        return Classification.reject("aspect")
    if not has_icon_name(node.name):
        return Classification.reject("no-icon-name")
    return Classification(True, 1, ("named-shape",))


CLASSIFIERS: Dict[NodeKind, KindRule] = {
    NodeKind.COMPONENT: _classify_master,
    NodeKind.COMPONENT_SET: _classify_master,
    NodeKind.INSTANCE: _classify_instance,
    NodeKind.FRAME: _classify_frame,
    NodeKind.VECTOR: _classify_shape,
    NodeKind.BOOLEAN_OPERATION: _classify_shape,
    NodeKind.GROUP: _classify_shape,
}


def classify(
    node: NodeSnapshot,
    ancestors: Sequence[NodeSnapshot] = (),
    child_kinds: ChildKinds = (),
    thresholds: ClassifierThresholds = CLASSIFIER_THRESHOLDS,
) -> Classification:
    """
    Classify a node as icon or not.

    Pure and total: never raises. Nodes without geometry or with a
    degenerate (zero-height) box are rejected.

    Args:
        node: Snapshot of the node to classify
        ancestors: Ancestor snapshots, nearest first
        child_kinds: Kinds of the node's direct children, in order
        thresholds: Tunable thresholds

    Returns:
        Classification with the accept decision and score

    Example:
        >>> from icon_toolkit.core.models import BoundingBox
        >>> frame = NodeSnapshot("1:1", "Frame", NodeKind.FRAME,
        ...                      bounding_box=BoundingBox(24, 24))
        >>> classify(frame, child_kinds=[NodeKind.VECTOR]).is_icon
        True
    """
    rule = CLASSIFIERS.get(node.kind)
    if rule is None:
        return Classification.reject("kind")
    if node.bounding_box is None:
        return Classification.reject("no-geometry")
    if node.bounding_box.aspect_ratio is None:
        return Classification.reject("degenerate")
    try:
        result = rule(node, ancestors, child_kinds, thresholds)
    except Exception as e:
        logger.debug(f"Classification failed for {node.id} ({node.name!r}): {e}")
        return Classification.reject("error")
    logger.debug(
        f"{node.kind} {node.id} {node.name!r}: "
        f"{'icon' if result.is_icon else 'not icon'} score={result.score} {list(result.reasons)}"
    )
    return result
