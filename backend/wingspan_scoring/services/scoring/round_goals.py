"""Round-goal aggregation from cube placements.

Placements map ``(round, score)`` to the list of player colors whose cube
sits on that slot. A color occupies at most one slot per round; that is
enforced when a cube is placed and re-checked by ``validate_placements``
whenever persisted state is loaded.
"""
import logging
from typing import Dict, List, Optional, Tuple

from wingspan_scoring.errors import DataIntegrity
from wingspan_scoring.services.goals import ROUNDS

logger = logging.getLogger(__name__)

Placements = Dict[Tuple[int, int], List[str]]


def round_scores(color: str, placements: Placements) -> Tuple[List[Optional[int]], int]:
    """Return the per-round scores for ``color`` and their sum.

    Rounds without a cube for the color are ``None`` and count as zero.
    """
    scores: List[Optional[int]] = []
    for r in ROUNDS:
        found = None
        for (round_no, score), colors in placements.items():
            if round_no != r or color not in (colors or []):
                continue
            if found is None:
                found = score
            else:
                logger.warning(
                    f"[integrity] color={color} occupies several slots in round {r}; using score {found}"
                )
                break
        scores.append(found)
    return scores, sum(s for s in scores if s is not None)


def validate_placements(placements: Placements) -> None:
    seen = set()
    for (round_no, score), colors in placements.items():
        if round_no not in ROUNDS:
            raise DataIntegrity(f'Placement for unknown round {round_no}')
        for color in colors or []:
            if (round_no, color) in seen:
                raise DataIntegrity(f'Color {color} occupies more than one slot in round {round_no}')
            seen.add((round_no, color))


def placements_to_dict(placements: Placements) -> dict:
    return {f'{r}-{s}': list(colors) for (r, s), colors in placements.items() if colors}


def placements_from_dict(data) -> Placements:
    placements: Placements = {}
    for key, colors in (data or {}).items():
        try:
            r, s = (int(p) for p in str(key).split('-', 1))
        except ValueError:
            raise DataIntegrity(f'Malformed placement key {key!r}')
        placements[(r, s)] = list(colors or [])
    return placements
