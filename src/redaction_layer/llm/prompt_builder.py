"""
Prompt builder for context-detection requests.

Responsible for:
- Loading and rendering Jinja2 templates (system + user prompts)
- Describing the contextual PII types and the coaching vocabulary to ignore
- Constructing a complete LLMGenerationRequest with the entity JSON Schema
"""

from pathlib import Path
from typing import Optional

import structlog
from jinja2 import Environment, FileSystemLoader

from redaction_layer.models.enums import EntityType
from redaction_layer.models.llm_models import LLMGenerationRequest


logger = structlog.get_logger(__name__)


ENTITY_TYPE_DESCRIPTIONS: dict[EntityType, str] = {
    EntityType.NAME: (
        'person names, full or standalone first names referring to a specific person '
        '("Sarah Johnson", "Dr. Smith", "Emily mentioned"); not generic references like "the client"'
    ),
    EntityType.ADDRESS: 'physical addresses and specific locations ("123 Main St, Boston, MA"); not company locations alone',
    EntityType.DOB: 'dates of birth, or ages combined with names ("born on March 15, 1985", "Sarah, 35 years old")',
    EntityType.MEDICAL: (
        'diagnoses, medications, health and mental health conditions, including casual mentions '
        '("diagnosed with anxiety", "has depression", "in therapy")'
    ),
    EntityType.FINANCIAL: 'account numbers, salaries, specific financial status ("makes $150,000", "account #12345")',
    EntityType.EMPLOYER: (
        'employer or company names that identify a person ("works at Google", "Sarah\'s team at Amazon"); '
        'not generic phrases like "a tech company"'
    ),
}

COACHING_EXCLUSIONS: tuple[str, ...] = (
    "Assessment names: DISC, Myers-Briggs, MBTI, Enneagram, StrengthsFinder, 16 Personalities",
    "Coaching frameworks: Adaptive Leadership, Growth Mindset, Fixed Mindset, Theory of Change, GROW model",
    'Generic roles: "the client", "the coachee", "a manager", "team member", "leader", "executive"',
    'Generic scenarios: "a direct report", "an employee", "the team"',
    'Professional titles without a name: "CEO", "VP", "Director"',
    'Generic company types: "a tech company", "the organization"',
)


class PromptBuilder:
    """
    Build LLM requests for contextual PII detection.

    The document category ("transcript", "assessment", ...) is rendered into
    the user prompt; it only steers the model and never changes which types
    are accepted.
    """

    def __init__(
        self,
        templates_dir: Path,
        response_schema: Optional[dict] = None,
        default_model: str = "qwen2.5:7b",
        default_temperature: float = 0.0,
        default_max_tokens: int = 2048,
        seed: Optional[int] = None,
    ):
        """
        Initialize prompt builder.

        Args:
            templates_dir: Directory containing system_prompt.txt and
                user_prompt_template.txt
            response_schema: JSON Schema sent as structured-output constraint
            default_model: Model name placed on every request
            default_temperature: Sampling temperature
            default_max_tokens: Completion token budget
            seed: Sampling seed for reproducibility
        """
        self.templates_dir = Path(templates_dir)
        self.response_schema = response_schema
        self.default_model = default_model
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens
        self.seed = seed

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False  # prompts, not HTML
        )

        try:
            self.system_template = self.jinja_env.get_template("system_prompt.txt")
            self.user_template = self.jinja_env.get_template("user_prompt_template.txt")
        except Exception as e:
            logger.error("Failed to load prompt templates", error=str(e), templates_dir=str(self.templates_dir))
            raise

        logger.info("Loaded prompt templates", templates_dir=str(self.templates_dir))

    def build_system_prompt(self) -> str:
        """System prompt is static (no variables)."""
        return self.system_template.render().strip()

    def build_user_prompt(self, text: str, category: str = "unknown") -> str:
        entity_types = [
            {"type": entity_type.value, "description": ENTITY_TYPE_DESCRIPTIONS[entity_type]}
            for entity_type in EntityType.context_types()
        ]
        return self.user_template.render(
            category=category or "unknown",
            entity_types=entity_types,
            exclusions=COACHING_EXCLUSIONS,
            text=text,
        ).strip()

    def build_request(self, text: str, category: str = "unknown") -> LLMGenerationRequest:
        """
        Build complete LLMGenerationRequest for one segment.

        Args:
            text: Segment text to analyse
            category: Document category hint

        Returns:
            LLMGenerationRequest with system prompt, user prompt and schema
        """
        system_prompt = self.build_system_prompt()
        user_prompt = self.build_user_prompt(text, category)

        logger.debug(
            "Detection request built",
            category=category,
            text_length=len(text),
            prompt_length=len(user_prompt),
        )

        return LLMGenerationRequest(
            system_prompt=system_prompt,
            prompt=user_prompt,
            model=self.default_model,
            temperature=self.default_temperature,
            max_tokens=self.default_max_tokens,
            format_schema=self.response_schema,
            seed=self.seed,
        )
