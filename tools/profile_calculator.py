"""
Profile Calculator — Local personality tracking. No API calls.

Each player choice nudges a fixed set of traits. The archetype is always
derived from the current trait values and never stored.
"""

import logging
from typing import Dict, Any, List, Optional

from models.game_config import (
    CHOICE_MAPPINGS,
    PERSONALITY_TRAITS,
    DEFAULT_TRAIT_VALUE,
    PROFILE_REVEAL_TURN,
    TRAIT_TO_CHOICE,
)
from models.profile import Profile, ProfileDelta, TraitChange, Archetype

logger = logging.getLogger("ProfileCalculator")


ARCHETYPES: Dict[frozenset, Archetype] = {
    frozenset({"aggression", "leadership"}): Archetype(
        name="The Warlord", description="Commands through strength and intimidation"),
    frozenset({"aggression", "independence"}): Archetype(
        name="The Lone Wolf", description="Fights alone, trusts no one"),
    frozenset({"diplomacy", "leadership"}): Archetype(
        name="The Diplomat", description="Leads through charisma and negotiation"),
    frozenset({"diplomacy", "morality"}): Archetype(
        name="The Peacemaker", description="Seeks harmony and ethical solutions"),
    frozenset({"caution", "morality"}): Archetype(
        name="The Guardian", description="Protects others while avoiding unnecessary risks"),
    frozenset({"creativity", "independence"}): Archetype(
        name="The Maverick", description="Forges unique paths with unconventional methods"),
    frozenset({"leadership", "loyalty"}): Archetype(
        name="The Commander", description="Inspires devoted followers through example"),
    frozenset({"caution", "creativity"}): Archetype(
        name="The Strategist", description="Carefully plans innovative solutions"),
}

DEFAULT_ARCHETYPE = Archetype(name="The Wanderer", description="Undefined path, many possibilities")


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def update_profile(profile: Profile, choice_type: str) -> Profile:
    """Apply a choice's trait deltas and return the updated profile.

    Unknown choice types leave the profile untouched (a warning is logged).
    """
    key = (choice_type or "").upper()
    mapping = CHOICE_MAPPINGS.get(key)
    if not mapping:
        logger.warning(f"Unknown choice type: {choice_type}")
        return profile

    traits = dict(profile.traits)
    changes: Dict[str, TraitChange] = {}
    for trait, delta in mapping.items():
        old = traits.get(trait, DEFAULT_TRAIT_VALUE)
        new = clamp01(old + delta)
        traits[trait] = new
        changes[trait] = TraitChange(old=old, new=new, delta=delta)

    record = ProfileDelta(choice_type=key, changes=changes)
    return profile.model_copy(update={
        "traits": traits,
        "history": [*profile.history, record],
    })


def reveal(profile: Profile, turn: int) -> Profile:
    """Flip the profile to revealed once the reveal turn is reached. Irreversible."""
    if profile.revealed or turn < PROFILE_REVEAL_TURN:
        return profile
    logger.info(f"Profile revealed at turn {turn}")
    return profile.model_copy(update={"revealed": True})


def profile_summary(profile: Profile) -> List[Dict[str, Any]]:
    """All known traits, highest first. Ties keep the fixed trait order."""
    summary = []
    for key, meta in PERSONALITY_TRAITS.items():
        value = profile.traits.get(key, DEFAULT_TRAIT_VALUE)
        summary.append({
            "key": key,
            "name": meta["name"],
            "value": value,
            "percentage": round(value * 100),
        })
    summary.sort(key=lambda t: t["value"], reverse=True)
    return summary


def dominant_traits(profile: Profile, count: int = 3) -> List[Dict[str, Any]]:
    return profile_summary(profile)[:count]


def archetype(profile: Profile) -> Archetype:
    top = dominant_traits(profile, 2)
    key = frozenset(t["key"] for t in top)
    return ARCHETYPES.get(key, DEFAULT_ARCHETYPE)


def analyze_evolution(profile: Profile) -> Dict[str, Any]:
    """How the profile drifted from the neutral baseline, and where it's heading."""
    if not profile.history:
        return {"message": "No history available"}

    shifts = []
    for key in PERSONALITY_TRAITS:
        change = profile.traits.get(key, DEFAULT_TRAIT_VALUE) - DEFAULT_TRAIT_VALUE
        shifts.append({
            "trait": key,
            "change": change,
            "direction": "increased" if change > 0 else "decreased",
        })
    shifts.sort(key=lambda s: abs(s["change"]), reverse=True)

    return {
        "total_decisions": len(profile.history),
        "biggest_shifts": shifts[:3],
        "current_archetype": archetype(profile).name,
        "trend": _analyze_trend(profile.history[-5:]),
    }


def _analyze_trend(recent: List[ProfileDelta]) -> Dict[str, Any]:
    if len(recent) < 2:
        return {"trend": "insufficient_data"}

    deltas: Dict[str, List[float]] = {}
    for entry in recent:
        for trait, change in entry.changes.items():
            deltas.setdefault(trait, []).append(change.delta)

    trends = {}
    for trait, values in deltas.items():
        avg = sum(values) / len(values)
        if abs(avg) > 0.05:
            trends[trait] = {
                "direction": "increasing" if avg > 0 else "decreasing",
                "strength": abs(avg),
            }
    return {"trend": "evolving", "recent_trends": trends}


def predict_choice_preferences(profile: Profile) -> List[Dict[str, Any]]:
    return [
        {"choice_type": TRAIT_TO_CHOICE[t["key"]], "likelihood": t["percentage"]}
        for t in dominant_traits(profile, 3)
    ]


def calculate_compatibility(profile: Profile, npc_traits: Dict[str, float]) -> Dict[str, Any]:
    """Score how well the player's traits line up with an NPC's (0-100)."""
    if not npc_traits:
        return {"score": 50, "similarities": [], "differences": [], "verdict": "Neutral"}

    compatibility = 0.0
    similarities, differences = [], []
    for trait, npc_value in npc_traits.items():
        player_value = profile.traits.get(trait, DEFAULT_TRAIT_VALUE)
        difference = abs(player_value - npc_value)
        if difference < 0.2:
            similarities.append({"trait": trait, "similarity": 1 - difference})
            compatibility += 1 - difference
        else:
            differences.append({"trait": trait, "difference": difference})
            compatibility -= difference * 0.5

    score = max(0.0, min(100.0, compatibility / len(npc_traits) * 100))
    return {
        "score": round(score),
        "similarities": similarities,
        "differences": differences,
        "verdict": _compatibility_verdict(score),
    }


def _compatibility_verdict(score: float) -> str:
    if score >= 80:
        return "Highly Compatible"
    if score >= 60:
        return "Compatible"
    if score >= 40:
        return "Neutral"
    if score >= 20:
        return "Incompatible"
    return "Highly Incompatible"


def reveal_text(profile: Profile) -> Optional[str]:
    """Player-facing reveal blurb. None while the profile is still hidden."""
    if not profile.revealed:
        return None

    arch = archetype(profile)
    lines = [f'You are "{arch.name}" - {arch.description}', "", "Your dominant traits:"]
    lines += [f"- {t['name']}: {t['percentage']}%" for t in dominant_traits(profile, 3)]

    evolution = analyze_evolution(profile)
    shifts = evolution.get("biggest_shifts", [])
    if shifts:
        lines += ["", "Your journey has shaped you:"]
        lines += [f"- {s['trait']} has {s['direction']} significantly" for s in shifts]

    lines += ["", "This unique combination of traits will determine your fate in the final chapters."]
    return "\n".join(lines)
