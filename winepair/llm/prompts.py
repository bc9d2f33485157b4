from __future__ import annotations

from ..recommendations.models import DishContext, ScoreBreakdown, WineCandidate

SYSTEM_PROMPT = (
    "You are an expert sommelier. Given a dish and one candidate wine from the "
    "cellar, judge how well they pair and explain why in one or two sentences.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"reasoning": "<one or two sentences>", "adjustment": <number between -1 and 1>}\n'
    "The adjustment nudges the current pairing score: positive when the pairing is "
    "better than the score suggests, negative when worse, 0 when it is about right. "
    "Omit adjustment only if you cannot judge."
)


def build_user_message(dish: DishContext, wine: WineCandidate, score: ScoreBreakdown | None = None) -> str:
    lines = ["## Dish"]
    lines.append(f"- Description: {dish.description}")
    if dish.protein:
        lines.append(f"- Protein: {dish.protein.value}")
    if dish.preparation:
        lines.append(f"- Preparation: {dish.preparation.value}")
    if dish.cuisine:
        lines.append(f"- Cuisine: {dish.cuisine}")
    if dish.intensity:
        lines.append(f"- Intensity: {dish.intensity.value}")
    if dish.occasion:
        lines.append(f"- Occasion: {dish.occasion.value.replace('_', ' ')}")
    if dish.season:
        lines.append(f"- Season: {dish.season.value}")
    if dish.guest_count:
        lines.append(f"- Guests: {dish.guest_count}")

    lines.append("\n## Candidate Wine")
    label = " ".join(p for p in (wine.producer, wine.name, str(wine.year) if wine.year else None) if p)
    lines.append(f"- Wine: {label or wine.wine_id}")
    lines.append(f"- Type: {wine.type.value}")
    lines.append(f"- Origin: {', '.join(p for p in (wine.region, wine.country) if p) or 'unknown'}")
    if wine.grape_varieties:
        lines.append(f"- Grapes: {', '.join(sorted(wine.grape_varieties))}")
    if wine.style:
        lines.append(f"- Style: {wine.style}")
    if wine.tasting_notes:
        lines.append(f"- Tasting notes: {wine.tasting_notes}")
    if wine.food_pairings:
        lines.append(f"- Classic pairings: {', '.join(wine.food_pairings)}")

    if score is not None:
        lines.append(f"\n## Current pairing score: {score.rule_total:.2f} (0 = poor, 1 = ideal)")

    return "\n".join(lines)
