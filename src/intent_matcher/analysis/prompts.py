# ABOUTME: Prompt text and the fixed taxonomy used for intent analysis and match explanations.
# ABOUTME: Builds the system and user messages sent to the language model.

from intent_matcher.models import Intent

INTENT_CATEGORIES: dict[str, tuple[str, ...]] = {
    "mentorship": ("seeking_mentor", "offering_mentorship", "peer_mentorship"),
    "career": ("job_seeking", "hiring", "career_transition", "networking"),
    "speaking": (
        "seeking_speaking_slots",
        "offering_speaking_opportunities",
        "panel_participation",
    ),
    "learning": ("skill_development", "knowledge_sharing", "workshops", "courses"),
    "collaboration": ("project_collaboration", "partnership", "co_founding"),
    "investment": ("seeking_funding", "angel_investing", "vc_connections"),
    "community": ("event_organizing", "community_building", "introductions"),
}

DOMAINS: tuple[str, ...] = (
    "DeFi",
    "CeFi",
    "Web3",
    "Blockchain",
    "Smart Contracts",
    "NFTs",
    "DAOs",
    "Tokenomics",
    "Engineering",
    "Product",
    "Marketing",
    "Design",
    "Operations",
    "Legal",
    "Compliance",
    "AI/ML",
    "Data Science",
    "Security",
    "Infrastructure",
)

FALLBACK_EXPLANATION = "You both have complementary goals and shared interests in the community."


def _format_categories() -> str:
    return "\n".join(
        f"- {name}: {', '.join(subcategories)}" for name, subcategories in INTENT_CATEGORIES.items()
    )


ANALYSIS_SYSTEM_PROMPT = f"""You analyze intent statements written by members of a professional \
networking community focused on Web3, decentralized and centralized finance, and adjacent \
technology roles. Turn each statement into structured data.

Intent types:
- receiving: the member is looking for something (a mentor, a job, a speaking slot, funding)
- giving: the member is offering something (mentoring, a role, a stage, capital)
- both: the statement contains both

Categories and their subcategories:
{_format_categories()}

Domains (use these spellings): {", ".join(DOMAINS)}

Experience levels:
- beginner: new to the field
- intermediate: some hands-on experience
- advanced: seasoned professional
- expert: recognized leader in the field

Availability:
- immediate: ready now
- within_month: within the next 30 days
- flexible: no fixed timeline
- not_specified: timing not mentioned

Respond with a single JSON object and nothing else."""


def build_analysis_prompt(raw_text: str) -> str:
    """Build the user message asking for a structured analysis of an intent statement.

    Args:
        raw_text: The member's free-text intent.

    Returns:
        Prompt text describing the expected JSON shape.
    """
    return f"""Analyze this intent statement:

"{raw_text}"

Return a JSON object shaped exactly like this:
{{
  "intentType": "receiving" | "giving" | "both",
  "categories": [
    {{"category": "<category>", "subcategories": ["<subcategory>"], "confidence": 0.0-1.0}}
  ],
  "domains": ["<domain>"],
  "experienceLevel": "beginner" | "intermediate" | "advanced" | "expert" | null,
  "availability": "immediate" | "within_month" | "flexible" | "not_specified"
}}"""


EXPLANATION_SYSTEM_PROMPT = (
    "You explain to two members of a professional community why they were matched. "
    "Be warm, professional and specific about what each can offer the other "
    "and the interests they share."
)


def _describe_member(label: str, name: str, intent: Intent) -> str:
    intent_type = intent.intent_type.value if intent.intent_type else "unknown"
    domains = ", ".join(intent.domains) or "none listed"
    return (
        f"{label} ({name}):\n"
        f"Intent type: {intent_type}\n"
        f'Intent: "{intent.raw_text}"\n'
        f"Domains: {domains}"
    )


def build_explanation_prompt(intent_a: Intent, intent_b: Intent, name_a: str, name_b: str) -> str:
    """Build the user message asking for a short match explanation.

    Args:
        intent_a: The querying member's intent.
        intent_b: The candidate's intent.
        name_a: Full name of the querying member.
        name_b: Full name of the candidate.

    Returns:
        Prompt text seeded with both members' intents.
    """
    return (
        "Write two or three friendly sentences explaining why these members are a good match.\n\n"
        f"{_describe_member('First member', name_a, intent_a)}\n\n"
        f"{_describe_member('Second member', name_b, intent_b)}"
    )
