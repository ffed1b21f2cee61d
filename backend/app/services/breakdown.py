"""
Fitting breakdowns.

Asks the configured LLM for one written section per recommended boot and
normalises whatever JSON shape comes back into BreakdownSection rows.
"""

import logging
from typing import Any, Optional

from app.schemas.breakdown import BreakdownSection
from app.schemas.quiz import QuizAnswers
from app.services.fit_profile import get_user_width_category
from app.services.llm_provider import LLMProvider, extract_json_from_response
from app.services.matching import get_user_width_mm
from app.services.mondo import shoe_size_to_foot_length_mm

logger = logging.getLogger(__name__)

MAX_TOKENS = 1600

SYSTEM_PROMPT = (
    "You are a professional ski boot fitter. "
    "Provide detailed, accurate fitting analyses in JSON format only."
)

BREAKDOWN_PROMPT = """You are a professional ski boot fitter with years of experience.
Write clear, specific, data-driven analyses for each recommended boot based on the user's profile and boot specifications.

User Profile:
{profile}

Recommended Boots:
{boots}

Write one section per boot (250-400 words each). Each section should:
1. Explain why this boot matches the user's profile
2. Highlight specific fit characteristics (width, volume, flex)
3. Discuss how the boot's features align with the user's needs
4. Provide practical fitting advice

Do NOT mention prices or retailers. Write in {language_name}.

Return ONLY a JSON object with this exact structure:
{{
  "sections": [
    {{
      "boot_id": "boot-id-1",
      "heading": "Boot Name - Brief Fit Summary",
      "body": "Detailed analysis text (250-400 words)..."
    }}
  ]
}}"""

LANGUAGE_NAMES = {
    "en-GB": "British English",
    "en-US": "American English",
}


def _foot_length_for_width_table(answers: QuizAnswers) -> Optional[float]:
    if answers.foot_length_mm:
        return max(answers.foot_length_mm.left, answers.foot_length_mm.right)
    if answers.shoe_size:
        return shoe_size_to_foot_length_mm(answers.shoe_size.system, answers.shoe_size.value)
    return None


def describe_foot_width(answers: QuizAnswers) -> str:
    """Foot width line for the prompt, e.g. "101mm (Average)" or "Wide"."""
    width = answers.foot_width
    if width is None:
        return "Not specified"

    width_mm = get_user_width_mm(width)
    if width_mm is None:
        return width.category.value if width.category else "Not specified"

    foot_length = _foot_length_for_width_table(answers)
    if foot_length:
        category = get_user_width_category(answers.gender, foot_length, width_mm)
        return f"{width_mm:g}mm ({category.value})"
    return f"{width_mm:g}mm"


def build_breakdown_prompt(answers: QuizAnswers, boots: list[dict[str, Any]], language: str = "en-GB") -> str:
    features = ", ".join(f.value for f in answers.features) or "None"
    profile = "\n".join([
        f"- Gender: {answers.gender.value}",
        f"- Weight: {answers.weight_kg:g}kg",
        f"- Ability: {answers.ability.value}",
        f"- Foot Width: {describe_foot_width(answers)}",
        f"- Toe Shape: {answers.toe_shape.value}",
        f"- Instep Height: {answers.instep_height.value}",
        f"- Ankle Volume: {answers.ankle_volume.value}",
        f"- Calf Volume: {answers.calf_volume.value}",
        f"- Boot Type: {answers.boot_type.value if answers.boot_type else 'Any'}",
        f"- Features: {features}",
    ])

    boot_lines = []
    for i, boot in enumerate(boots, 1):
        boot_lines.append(
            f"Boot {i}: {boot.get('brand')} {boot.get('model')} (id: {boot.get('boot_id')})\n"
            f"- Flex: {boot.get('flex')}\n"
            f"- Last Width: {boot.get('last_width_mm')}mm\n"
            f"- Match Score: {boot.get('score')}/100"
        )

    return BREAKDOWN_PROMPT.format(
        profile=profile,
        boots="\n\n".join(boot_lines),
        language_name=LANGUAGE_NAMES.get(language, "English"),
    )


def _find_section_list(payload: Any) -> list:
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    if isinstance(payload.get("sections"), list):
        return payload["sections"]
    for value in payload.values():
        if isinstance(value, list):
            return value
    return []


def parse_breakdown_sections(payload: Any, boots: list[dict[str, Any]]) -> list[BreakdownSection]:
    """Normalise an LLM payload into sections, filling missing ids and headings by position."""
    sections = []
    for i, raw in enumerate(_find_section_list(payload)):
        if not isinstance(raw, dict):
            continue
        boot = boots[i] if i < len(boots) else {}
        boot_id = raw.get("boot_id") or raw.get("bootId") or boot.get("boot_id") or f"boot-{i}"
        heading = raw.get("heading") or f"{boot.get('brand', '')} {boot.get('model', '')}".strip()
        sections.append(BreakdownSection(
            boot_id=str(boot_id),
            heading=heading or f"Boot {i + 1}",
            body=str(raw.get("body") or ""),
        ))
    return sections


def count_words(sections: list[BreakdownSection]) -> int:
    return sum(len(section.body.split()) for section in sections)


async def generate_breakdown(
    provider: LLMProvider,
    answers: QuizAnswers,
    boots: list[dict[str, Any]],
    language: str = "en-GB",
) -> list[BreakdownSection]:
    """Generate breakdown sections. Returns [] when the provider gives nothing usable."""
    if not boots:
        return []

    prompt = build_breakdown_prompt(answers, boots, language)
    response = await provider.generate(prompt, max_tokens=MAX_TOKENS, system=SYSTEM_PROMPT, json_mode=True)

    if not response:
        logger.warning(f"No breakdown response from provider '{provider.name}'")
        return []

    payload = extract_json_from_response(response)
    if payload is None:
        logger.warning(f"Could not parse breakdown JSON: {response[:200]}")
        return []

    sections = parse_breakdown_sections(payload, boots)
    logger.info(f"Generated {len(sections)} breakdown sections ({count_words(sections)} words)")
    return sections
