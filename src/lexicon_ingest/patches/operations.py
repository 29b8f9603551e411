"""
Repair operations applied by the patch layer.

Each operation takes a lemma and the step that scheduled it and returns a
patched copy; the input lemma is left untouched. Every operation is
idempotent: running it on its own output changes nothing.
"""
from __future__ import annotations

import copy
import logging
import re
from typing import Callable, Dict, List

from ..markup import collapse_whitespace, is_placeholder_text
from ..models import Definition, Example, Lemma
from .schema import (
    CROSS_REFERENCE_MARKER,
    CROSS_REFERENCE_MAX_LENGTH,
    DEFAULT_AD_HOC_LABEL,
    PLACEHOLDER_GLOSS,
    PatchStep,
    RepairOperation,
)

logger = logging.getLogger(__name__)

Operation = Callable[[Lemma, PatchStep], Lemma]


def _is_blank_gloss(definition: Definition) -> bool:
    return not definition.plain_text.strip()


def _is_dead(definition: Definition) -> bool:
    return _is_blank_gloss(definition) and all(
        is_placeholder_text(ex.text) for ex in definition.examples
    )


def drop_dead_definitions(lemma: Lemma, step: PatchStep) -> Lemma:
    """Remove definitions with no gloss and no example content."""
    patched = copy.deepcopy(lemma)
    for sense in patched.senses:
        sense.definitions = [d for d in sense.definitions if not _is_dead(d)]
    return patched


def inject_placeholder_gloss(lemma: Lemma, step: PatchStep) -> Lemma:
    """Give blank glosses the editorial placeholder."""
    patched = copy.deepcopy(lemma)
    for sense in patched.senses:
        for definition in sense.definitions:
            if _is_blank_gloss(definition):
                definition.text = PLACEHOLDER_GLOSS
    return patched


def repair_cross_reference(lemma: Lemma, step: PatchStep) -> Lemma:
    """Turn short glosses missing the ``+`` marker into bold pointers."""
    patched = copy.deepcopy(lemma)
    for sense in patched.senses:
        for definition in sense.definitions:
            plain = definition.plain_text.strip()
            if not plain or plain == PLACEHOLDER_GLOSS or CROSS_REFERENCE_MARKER in plain:
                continue
            if len(plain) < CROSS_REFERENCE_MAX_LENGTH:
                definition.text = f"<b>{plain} {CROSS_REFERENCE_MARKER}</b>"
    return patched


def drop_empty_examples(lemma: Lemma, step: PatchStep) -> Lemma:
    """Remove empty or ``:`` examples across senses and subentries."""
    patched = copy.deepcopy(lemma)
    for definition in patched.iter_definitions():
        definition.examples = [
            ex for ex in definition.examples if not is_placeholder_text(ex.text)
        ]
    return patched


def _subentry_fragments(value: object) -> List[str]:
    if isinstance(value, str):
        value = [value]
    return [collapse_whitespace(str(v)).lower() for v in value]


def relocate_misplaced_example(lemma: Lemma, step: PatchStep) -> Lemma:
    """Move example text authored as a gloss into an ad-hoc example.

    Only definitions of the subentry whose sign contains every fragment in
    ``subentry`` and whose gloss starts with ``prefix`` are touched.
    """
    fragments = _subentry_fragments(step.params["subentry"])
    prefix = str(step.params["prefix"])
    label = str(step.params.get("label", DEFAULT_AD_HOC_LABEL))

    patched = copy.deepcopy(lemma)
    matched = False
    for sub in patched.subentries:
        sign = collapse_whitespace(sub.plain_sign).lower()
        if not all(fragment in sign for fragment in fragments):
            continue
        matched = True
        for sense in sub.senses:
            for definition in sense.definitions:
                if not definition.plain_text.strip().startswith(prefix):
                    continue
                definition.examples.insert(0, Example(
                    text=definition.text,
                    is_ad_hoc=True,
                    ad_hoc_label=label,
                ))
                definition.text = PLACEHOLDER_GLOSS

    if not matched:
        logger.warning(
            "No subentry of %r matches %s", lemma.lemma_sign, step.params["subentry"]
        )
    return patched


def inject_usage_mark(lemma: Lemma, step: PatchStep) -> Lemma:
    """Set the used-as mark on glosses that open with a trigger word."""
    trigger = re.compile(rf"^{re.escape(str(step.params['trigger']))}\b", re.IGNORECASE)
    mark = str(step.params["mark"])
    mark_key = mark.lower().rstrip(".")

    patched = copy.deepcopy(lemma)
    for definition in patched.iter_definitions():
        if not trigger.search(definition.plain_text.strip()):
            continue
        if definition.utc and mark_key in definition.utc.lower():
            continue
        definition.utc = mark
    return patched


OPERATIONS: Dict[RepairOperation, Operation] = {
    RepairOperation.INJECT_USAGE_MARK: inject_usage_mark,
    RepairOperation.DROP_DEAD_DEFINITIONS: drop_dead_definitions,
    RepairOperation.INJECT_PLACEHOLDER_GLOSS: inject_placeholder_gloss,
    RepairOperation.REPAIR_CROSS_REFERENCE: repair_cross_reference,
    RepairOperation.RELOCATE_MISPLACED_EXAMPLE: relocate_misplaced_example,
    RepairOperation.DROP_EMPTY_EXAMPLES: drop_empty_examples,
}
