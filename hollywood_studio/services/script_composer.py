"""Script Composer - builds a narration script of a target length from category templates."""

import random
from typing import Any, Optional

from hollywood_studio.core.config import Settings
from hollywood_studio.models.schemas import Script, ScriptSection, SectionKind, Tone
from hollywood_studio.services.script_templates import (
    GENERIC_TOPIC_OPENER,
    INTRO_SEED,
    TONE_FILLERS,
    TONE_STARTERS,
    TOPIC_OPENERS,
    ScriptTemplate,
    TemplateRegistry,
)
from hollywood_studio.utils.text_utils import count_words, truncate_to_word_count

INTRO_SHARE = 0.15
CONCLUSION_SHARE = 0.10


class ScriptComposer:
    """Composes narration scripts whose length tracks the requested duration."""

    def __init__(
        self,
        settings: Settings,
        logger: Any,
        registry: Optional[TemplateRegistry] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize script composer.

        Args:
            settings: Application settings
            logger: Logger instance
            registry: Template registry (built-in templates when omitted)
            rng: Random generator for filler selection (seed it for reproducible scripts)
        """
        self.settings = settings
        self.logger = logger
        self.registry = registry or TemplateRegistry()
        self.rng = rng or random.Random()
        self.words_per_minute = settings.words_per_minute

    def compose(
        self,
        title: str,
        category: str,
        duration_minutes: float,
        tone: Tone = Tone.PROFESSIONAL,
    ) -> Script:
        """
        Build a script for the given title and category.

        The total word budget is ``round(duration_minutes * words_per_minute)``:
        15% intro, 10% conclusion, the rest split evenly across the template's
        section topics. Every part is expanded with filler sentences and then
        cut to its exact budget, so the script never runs long.

        Args:
            title: Video title
            category: Content category (unknown categories use the default template)
            duration_minutes: Target narration length in minutes
            tone: Narration tone

        Returns:
            Script with ordered sections and joined full text
        """
        tone = Tone(tone)
        category_key, template = self.registry.get(category)
        if not self.registry.is_known(category):
            self.logger.warning(f"Unknown category '{category}', using '{category_key}' template")

        target_words = max(0, round(duration_minutes * self.words_per_minute))
        budgets = self._allocate_words(target_words, len(template.sections))

        self.logger.info(
            f"Composing script for '{title}' ({category_key}, {tone.value}): "
            f"{target_words} words across {len(budgets)} parts"
        )

        sections: list[ScriptSection] = []
        sections.append(
            self._build_section(
                kind=SectionKind.INTRO,
                heading="Introduction",
                seed=self._intro_seed(title, template),
                budget=budgets[0],
                topic=title,
                tone=tone,
                template=template,
            )
        )
        for topic, budget in zip(template.sections, budgets[1:-1]):
            sections.append(
                self._build_section(
                    kind=SectionKind.CONTENT,
                    heading=topic,
                    seed=self._content_seed(topic, tone),
                    budget=budget,
                    topic=topic,
                    tone=tone,
                    template=template,
                )
            )
        sections.append(
            self._build_section(
                kind=SectionKind.CONCLUSION,
                heading="Conclusion",
                seed=template.conclusion.format(title=title),
                budget=budgets[-1],
                topic=title,
                tone=tone,
                template=template,
            )
        )

        full_text = "\n\n".join(section.body for section in sections)
        word_count = count_words(full_text)
        self.logger.debug(f"Script composed: {word_count}/{target_words} words")

        return Script(
            title=title,
            category=category_key,
            tone=tone,
            sections=sections,
            full_text=full_text,
            word_count=word_count,
            target_word_count=target_words,
        )

    @staticmethod
    def _allocate_words(total: int, section_count: int) -> list[int]:
        """Split the word budget into [intro, *sections, conclusion]; every part gets at least one word."""
        intro = round(total * INTRO_SHARE)
        conclusion = round(total * CONCLUSION_SHARE)
        remaining = max(0, total - intro - conclusion)
        per_section, extra = divmod(remaining, section_count)
        content = [per_section + (1 if i < extra else 0) for i in range(section_count)]
        return [max(1, words) for words in [intro, *content, conclusion]]

    @staticmethod
    def _intro_seed(title: str, template: ScriptTemplate) -> str:
        hook = template.hook.format(statistic=template.statistic, experts=template.experts)
        return INTRO_SEED.format(title=title, hook=hook)

    @staticmethod
    def _content_seed(topic: str, tone: Tone) -> str:
        opener = TOPIC_OPENERS.get(topic) or GENERIC_TOPIC_OPENER.format(topic=topic.lower())
        return f"{TONE_STARTERS[tone]} {opener}"

    def _build_section(
        self,
        kind: SectionKind,
        heading: str,
        seed: str,
        budget: int,
        topic: str,
        tone: Tone,
        template: ScriptTemplate,
    ) -> ScriptSection:
        body = self._expand(seed, budget, topic, tone, template)
        words = count_words(body)
        return ScriptSection(
            kind=kind,
            heading=heading,
            body=body,
            word_count=words,
            approximate_duration_seconds=round(words / self.words_per_minute * 60, 2),
        )

    def _expand(self, seed: str, budget: int, topic: str, tone: Tone, template: ScriptTemplate) -> str:
        """Append random filler sentences to seed until budget is reached, then cut to budget."""
        pool = TONE_FILLERS[tone] + template.filler
        sentences = [seed]
        words = count_words(seed)
        previous: Optional[str] = None
        while words < budget:
            choice = self.rng.choice(pool)
            if choice == previous and len(pool) > 1:
                continue
            previous = choice
            sentence = choice.format(topic=topic.lower(), subject=self.rng.choice(template.vocabulary))
            sentences.append(sentence)
            words += count_words(sentence)
        return truncate_to_word_count(" ".join(sentences), budget)
