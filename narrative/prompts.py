"""
Canonical Prompt Generation
===========================

Pure functions for generating generator prompts from a PreferenceSet,
a CulturalProfile and (for follow-up tasks) a CulturalNarrative.

INVARIANT: Same inputs → same prompt_hash
No request context, no runtime state.
"""

from __future__ import annotations
from dataclasses import dataclass
import hashlib
import json
from typing import Dict, Optional, Sequence, Tuple

from profile_engine.contracts.entities import ALL_CATEGORIES
from profile_engine.contracts.profile import Connection, CulturalProfile, PreferenceSet

from .contracts import CulturalNarrative


NARRATIVE = "cultural_narrative"
DISCOVERIES = "discovery_recommendations"
CHALLENGES = "growth_challenges"
EVOLUTION = "evolution_predictions"

# task → (temperature, max_tokens)
TASK_SAMPLING: Dict[str, Tuple[float, int]] = {
    NARRATIVE: (0.9, 3500),
    DISCOVERIES: (0.85, 1200),
    CHALLENGES: (0.85, 1000),
    EVOLUTION: (0.8, 1000),
}

MAX_DISCOVERIES = 6
MAX_CHALLENGES = 4
MAX_PREDICTIONS = 4


@dataclass(frozen=True)
class CanonicalPrompt:
    """
    Frozen prompt with hash for deterministic tracking.

    INVARIANT: Same task_type + inputs → same prompt_hash
    """
    task_type: str
    input_hash: str
    prompt_text: str
    prompt_hash: str

    @staticmethod
    def create(
        task_type: str,
        preferences: PreferenceSet,
        profile: CulturalProfile,
        narrative: Optional[CulturalNarrative] = None
    ) -> CanonicalPrompt:
        """Factory method; the only way to create prompts."""
        prompt_text = PromptTemplates.render(task_type, preferences, profile, narrative)
        return CanonicalPrompt(
            task_type=task_type,
            input_hash=_input_hash(preferences, profile, narrative),
            prompt_text=prompt_text,
            prompt_hash=hashlib.sha256(prompt_text.encode()).hexdigest(),
        )


def _input_hash(
    preferences: PreferenceSet,
    profile: CulturalProfile,
    narrative: Optional[CulturalNarrative]
) -> str:
    payload = {
        "preferences": preferences.to_dict(),
        "profile": profile.to_dict(),
        "narrative": narrative.to_dict() if narrative else None,
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(',', ':'), default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


# =============================================================================
# CONTEXT BUILDERS
# =============================================================================

def preference_lines(preferences: PreferenceSet, upper: bool = True) -> str:
    lines = []
    for category, items in preferences.items():
        if items:
            label = category.value.upper() if upper else category.value
            lines.append(f"{label}: {', '.join(items)}")
    return "\n".join(lines) or "No preferences provided"


def entity_context(profile: CulturalProfile) -> str:
    """Per-category list of matched graph entities."""
    sections = []
    for category in ALL_CATEGORIES:
        entities = profile.insights.entities_for(category)
        if not entities:
            continue
        details = []
        for entity in entities:
            popularity = f"{entity.popularity:.2f}" if entity.popularity is not None else "N/A"
            details.append(
                f'"{entity.name}" (ID: {entity.id}, Popularity: {popularity}, '
                f'Types: {", ".join(entity.types) or "N/A"}, '
                f'Geographic: {entity.country or "Global"})'
            )
        sections.append(f"{category.value.upper()} ENTITIES:\n  - " + "\n  - ".join(details))
    return "\n\n".join(sections) or "No entities were matched in the cultural graph"


def connection_context(connections: Sequence[Connection]) -> str:
    if not connections:
        return "No significant cross-domain connections detected"
    return "\n".join(
        f"{c.domain1.value} <-> {c.domain2.value}: {c.strength * 100:.1f}% strength - "
        f"{c.explanation} ({len(c.related_entity_ids)} related entities)"
        for c in connections
    )


def diversity_context(profile: CulturalProfile) -> str:
    insights = profile.insights
    lines = [
        f"Graph recognition: {insights.match_rate * 100:.1f}% of preferences matched",
        f"Cultural diversity score: {profile.diversity_score}/100",
        f"Cultural depth: {profile.cultural_depth}/100",
        f"Cross-domain connections: {len(profile.connections)}",
        f"Active domain coverage: {len(insights.domains_with_entities)}/{len(ALL_CATEGORIES)}",
    ]
    if insights.diversity_breakdown is not None:
        breakdown = insights.diversity_breakdown.to_dict()
        lines.append(
            "Diversity breakdown: "
            + ", ".join(f"{name} {value}" for name, value in breakdown.items())
        )
    if insights.error:
        lines.append(f"Analysis limited: {insights.error}")
    return "\n".join(lines)


def discovery_context(profile: CulturalProfile) -> str:
    """Compact graph summary used by the follow-up tasks."""
    insights = profile.insights
    lines = [
        "CULTURAL GRAPH ANALYSIS:",
        f"- Recognition rate: {insights.match_rate * 100:.1f}%",
        f"- Recognized entities: {insights.total_entities_found}",
        f"- Active domains: {len(insights.domains_with_entities)}/{len(ALL_CATEGORIES)}",
    ]
    for category in ALL_CATEGORIES:
        entities = insights.entities_for(category)
        if not entities:
            continue
        average = sum(e.popularity or 0.0 for e in entities) / len(entities)
        types = sorted({t for e in entities for t in e.types})
        lines.append(
            f"{category.value}: {len(entities)} entities, avg popularity {average:.2f}, "
            f"types: {', '.join(types) or 'N/A'}"
        )
    return "\n".join(lines)


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"- {item}" for item in items) or "- none"


# =============================================================================
# TEMPLATES
# =============================================================================

class PromptTemplates:
    """
    Prompt templates for each task type.

    All templates are pure functions of their inputs.
    """

    @staticmethod
    def render(
        task_type: str,
        preferences: PreferenceSet,
        profile: CulturalProfile,
        narrative: Optional[CulturalNarrative] = None
    ) -> str:
        if task_type == NARRATIVE:
            return PromptTemplates._narrative_prompt(preferences, profile)
        if task_type in (DISCOVERIES, CHALLENGES) and narrative is None:
            raise ValueError(f"Task {task_type} requires a narrative")
        if task_type == DISCOVERIES:
            return PromptTemplates._discovery_prompt(preferences, profile, narrative)
        if task_type == CHALLENGES:
            return PromptTemplates._challenge_prompt(preferences, profile, narrative)
        if task_type == EVOLUTION:
            return PromptTemplates._evolution_prompt(preferences, profile)
        raise ValueError(f"Unknown task type: {task_type}")

    @staticmethod
    def _narrative_prompt(preferences: PreferenceSet, profile: CulturalProfile) -> str:
        insights = profile.insights
        domains = ", ".join(c.value for c in insights.domains_with_entities) or "none"
        return f"""TASK: {NARRATIVE}

ROLE:
You are a cultural anthropologist with access to a cultural knowledge graph.

PREFERENCES:
{preference_lines(preferences)}

GRAPH SUMMARY:
- Preferences analyzed: {insights.total_input_preferences}
- Entities matched: {insights.total_entities_found}/{insights.total_input_preferences} ({insights.match_rate * 100:.1f}% recognition)
- Active domains: {domains}

ENTITIES:
{entity_context(profile)}

CROSS-DOMAIN CONNECTIONS:
{connection_context(profile.connections)}

THEMES:
{_bullets(profile.themes)}

PATTERNS:
{_bullets(profile.patterns)}

METRICS:
{diversity_context(profile)}

INSTRUCTIONS:
Write an original narrative identity report grounded ONLY in the data above.
Match rate above 80% suggests mainstream alignment; below 20% an underground perspective.
Diversity above 80 suggests exceptionally broad engagement; below 40 a specialized profile.
Do NOT use generic templates.

OUTPUT FORMAT (JSON):
{{
  "title": "<3-4 word cultural archetype>",
  "story": "<4-5 paragraph narrative>",
  "insights": ["<5 insights>"],
  "personality": "<one sentence>",
  "culturalDNA": "<one sentence>",
  "recommendations": ["<6 recommendations>"],
  "evolutionPredictions": ["<4 predictions>"],
  "culturalBlindSpots": ["<3 blind spots>"],
  "diversityScore": <integer 0-100>
}}"""

    @staticmethod
    def _narrative_header(narrative: CulturalNarrative) -> str:
        blind_spots = ", ".join(narrative.cultural_blind_spots or []) or "None identified"
        score = narrative.diversity_score if narrative.diversity_score is not None else "unknown"
        return (
            f"CULTURAL IDENTITY: {narrative.title}\n"
            f"CULTURAL DNA: {narrative.cultural_dna}\n"
            f"PERSONALITY: {narrative.personality}\n"
            f"DIVERSITY SCORE: {score}/100\n"
            f"CULTURAL BLIND SPOTS: {blind_spots}"
        )

    @staticmethod
    def _discovery_prompt(
        preferences: PreferenceSet,
        profile: CulturalProfile,
        narrative: CulturalNarrative
    ) -> str:
        return f"""TASK: {DISCOVERIES}

{PromptTemplates._narrative_header(narrative)}

PREFERENCES:
{preference_lines(preferences)}

{discovery_context(profile)}

CROSS-DOMAIN CONNECTIONS:
{connection_context(profile.connections)}

INSTRUCTIONS:
Generate {MAX_DISCOVERIES} specific discovery recommendations.
Name concrete artists, works, places or experiences.
Address the blind spots and build from the strongest domains toward the weakest.

OUTPUT FORMAT (JSON):
{{"recommendations": ["<recommendation>", ...]}}"""

    @staticmethod
    def _challenge_prompt(
        preferences: PreferenceSet,
        profile: CulturalProfile,
        narrative: CulturalNarrative
    ) -> str:
        return f"""TASK: {CHALLENGES}

{PromptTemplates._narrative_header(narrative)}

PREFERENCES:
{preference_lines(preferences)}

{discovery_context(profile)}

CROSS-DOMAIN CONNECTIONS:
{connection_context(profile.connections)}

INSTRUCTIONS:
Generate {MAX_CHALLENGES} actionable, time-bound cultural growth challenges.
Target the blind spots, use existing interests as stepping stones.
Calibrate difficulty to the diversity score: 80+ advanced, 60-79 intermediate,
40-59 foundational, below 40 accessible.

OUTPUT FORMAT (JSON):
{{"challenges": ["<challenge>", ...]}}"""

    @staticmethod
    def _evolution_prompt(preferences: PreferenceSet, profile: CulturalProfile) -> str:
        patterns = ", ".join(profile.patterns) or "none"
        return f"""TASK: {EVOLUTION}

PREFERENCES:
{preference_lines(preferences, upper=False)}

{discovery_context(profile)}

PATTERNS: {patterns}

CROSS-DOMAIN CONNECTIONS:
{connection_context(profile.connections)}

INSTRUCTIONS:
Predict {MAX_PREDICTIONS} ways this person's cultural taste will evolve over the next 2-3 years.
Base every prediction on the data above.

OUTPUT FORMAT (JSON):
{{"predictions": ["<prediction>", ...]}}"""

