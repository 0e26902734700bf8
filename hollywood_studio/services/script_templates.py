"""Script templates - category templates and filler sentence pools for the ScriptComposer."""

from typing import Optional

from pydantic import BaseModel, Field

from hollywood_studio.models.schemas import Tone

DEFAULT_CATEGORY = "business"


class ScriptTemplate(BaseModel):
    """Narrative skeleton for one content category."""

    hook: str = Field(..., description="Opening hook; may use {statistic} and {experts}")
    sections: list[str] = Field(..., min_length=1, description="Ordered section topics")
    conclusion: str = Field(..., description="Closing seed; may use {title}")
    vocabulary: list[str] = Field(..., min_length=1, description="Subjects used to fill {subject} in fillers")
    filler: list[str] = Field(default_factory=list, description="Category-flavoured filler sentences")
    statistic: str = Field(default="73%", description="Value for the {statistic} placeholder")
    experts: str = Field(default="Wall Street insiders", description="Value for the {experts} placeholder")


INTRO_SEED = (
    "Welcome to AI Hollywood Studio. Today we're diving deep into {title}. {hook} "
    "By the end of this video, you'll have a complete understanding of how to apply "
    "these strategies to your own situation."
)

DEFAULT_CONCLUSION = (
    "That wraps up our comprehensive guide to {title}. Remember, the key to success is "
    "taking action on what you've learned today. Subscribe for more professional content, "
    "and I'll see you in the next video."
)

TONE_STARTERS: dict[Tone, str] = {
    Tone.EDUCATIONAL: "Research shows that",
    Tone.PROFESSIONAL: "Industry analysis indicates",
    Tone.CONVERSATIONAL: "Let me break this down for you:",
    Tone.AUTHORITATIVE: "The evidence is clear:",
    Tone.MOTIVATIONAL: "Here's what most people don't realize:",
}

TOPIC_OPENERS: dict[str, str] = {
    "Understanding the fundamentals": (
        "mastering the basics is crucial for long-term success. We need to establish a solid "
        "foundation before moving to advanced strategies."
    ),
    "Common mistakes to avoid": (
        "avoiding these critical errors can save you thousands of dollars and months of frustration. "
        "Most beginners fall into predictable traps that experienced professionals know how to sidestep."
    ),
    "Proven strategies that work": (
        "these time-tested methods have consistently delivered results across different market conditions."
    ),
    "Market analysis and trends": (
        "understanding current market dynamics is essential for making informed decisions."
    ),
}

GENERIC_TOPIC_OPENER = (
    "this section covers {topic} with practical insights and actionable strategies you can "
    "implement immediately."
)

TONE_FILLERS: dict[Tone, list[str]] = {
    Tone.PROFESSIONAL: [
        "Industry data consistently points in the same direction on {topic}.",
        "Decision makers who track {subject} closely tend to outperform their peers.",
        "A disciplined process matters more here than any single prediction.",
        "The most reliable results come from measuring outcomes and adjusting carefully.",
        "Professionals treat {subject} as a long-term commitment rather than a quick win.",
        "Clear benchmarks make it far easier to evaluate progress over time.",
        "Risk and reward should always be weighed together before acting.",
        "Documenting each decision helps you learn from both successes and setbacks.",
    ],
    Tone.EDUCATIONAL: [
        "Let's look at how {topic} actually works in practice.",
        "A simple example makes the idea behind {subject} much easier to understand.",
        "Studies of {subject} reveal patterns that are easy to miss at first glance.",
        "Understanding the underlying principle lets you apply it in new situations.",
        "Think of it as a building block that supports everything that follows.",
        "The key term to remember here is {subject}.",
        "Breaking the concept into small steps makes it far less intimidating.",
        "Once you see the pattern, you will start noticing it everywhere.",
    ],
    Tone.CONVERSATIONAL: [
        "Honestly, {topic} is simpler than most people make it sound.",
        "You have probably wondered about {subject} at some point too.",
        "Here's the thing: small habits add up faster than you would expect.",
        "I like to think about it like this, one step at a time.",
        "Let's keep it practical and skip the jargon.",
        "If that sounds like a lot, don't worry, we'll walk through it together.",
        "Most of us learned about {subject} the hard way.",
        "So what does that mean for you day to day?",
    ],
    Tone.AUTHORITATIVE: [
        "The facts on {topic} leave very little room for debate.",
        "Every serious analysis of {subject} arrives at the same conclusion.",
        "Ignoring these fundamentals is the fastest route to poor results.",
        "The numbers speak for themselves, and they are unambiguous.",
        "Experienced practitioners have relied on this approach for decades.",
        "There is no shortcut that replaces a sound strategy.",
        "Those who master {subject} set the standard for everyone else.",
        "Make no mistake, this is where outcomes are decided.",
    ],
    Tone.MOTIVATIONAL: [
        "You are capable of mastering {topic}, starting today.",
        "Every expert in {subject} was once a complete beginner.",
        "Progress beats perfection, so take the first step now.",
        "Imagine where you could be a year from now with consistent effort.",
        "Small wins build the confidence you need for big results.",
        "Your future self will thank you for the work you put in today.",
        "The best time to start was yesterday, and the next best time is right now.",
        "Believe in the process and keep moving forward.",
    ],
}


def _template(
    hook: str,
    sections: list[str],
    vocabulary: list[str],
    filler: list[str],
    conclusion: str = DEFAULT_CONCLUSION,
    **extra,
) -> ScriptTemplate:
    return ScriptTemplate(
        hook=hook, sections=sections, conclusion=conclusion, vocabulary=vocabulary, filler=filler, **extra
    )


BUILTIN_TEMPLATES: dict[str, ScriptTemplate] = {
    "finance": _template(
        hook="What if I told you that {statistic} of people are making this crucial financial mistake?",
        sections=[
            "Understanding the fundamentals",
            "Common mistakes to avoid",
            "Proven strategies that work",
            "Step-by-step implementation",
            "Real-world examples",
            "Action steps you can take today",
        ],
        vocabulary=["budgeting", "emergency savings", "compound interest", "debt repayment", "cash flow"],
        filler=[
            "A written budget turns vague goals about {subject} into concrete numbers.",
            "Automating your savings removes willpower from the equation.",
            "High-interest debt quietly erodes the progress you make on {subject}.",
            "Tracking every expense for a single month is often eye-opening.",
            "An emergency fund gives you room to make calm decisions.",
        ],
    ),
    "investing": _template(
        hook="The investing strategy that {experts} don't want you to know about.",
        sections=[
            "Market analysis and trends",
            "Risk assessment strategies",
            "Portfolio diversification techniques",
            "Timing and execution",
            "Long-term wealth building",
            "Your next steps",
        ],
        vocabulary=["index funds", "asset allocation", "diversification", "dividends", "market volatility"],
        filler=[
            "Low-cost {subject} have historically rewarded patient investors.",
            "Diversification spreads risk so that no single position can sink the portfolio.",
            "Time in the market usually matters more than timing the market.",
            "Fees compound just like returns, only in the wrong direction.",
            "Rebalancing once or twice a year keeps {subject} aligned with your goals.",
        ],
    ),
    "crypto": _template(
        hook="Cryptocurrency just hit a major milestone that changes everything.",
        sections=[
            "Current crypto landscape",
            "Technology breakdown",
            "Investment opportunities",
            "Risk management",
            "Future predictions",
            "Getting started safely",
        ],
        vocabulary=["blockchain", "bitcoin", "self-custody", "decentralized finance", "stablecoins"],
        filler=[
            "Every {subject} transaction is recorded on a public ledger.",
            "Volatility in digital assets can be dramatic in both directions.",
            "Securing your private keys is the first rule of self-custody.",
            "Regulation around {subject} continues to evolve quickly.",
            "Only invest what you can afford to lose in a market this young.",
        ],
    ),
    "ai": _template(
        hook="AI technology is revolutionizing industries faster than predicted.",
        sections=[
            "Current AI developments",
            "Industry impact analysis",
            "Business opportunities",
            "Implementation strategies",
            "Future implications",
            "Competitive advantages",
        ],
        vocabulary=["machine learning", "automation", "language models", "data pipelines", "computer vision"],
        filler=[
            "Companies adopting {subject} early are already seeing productivity gains.",
            "Good data matters more than the most sophisticated model.",
            "Automation frees people to focus on higher-value work.",
            "Responsible deployment of {subject} builds lasting trust with customers.",
            "The cost of experimenting with AI has never been lower.",
        ],
    ),
    "startups": _template(
        hook="Most startups fail for the same handful of reasons, and they are avoidable.",
        sections=[
            "Finding a real problem",
            "Validating the idea",
            "Building the first product",
            "Funding and runway",
            "Growth and traction",
            "Building the team",
        ],
        vocabulary=["product-market fit", "customer discovery", "runway", "fundraising", "early adopters"],
        filler=[
            "Talking to customers early saves months of building the wrong thing.",
            "Founders who obsess over {subject} usually find their footing faster.",
            "Runway is measured in months, so every expense deserves scrutiny.",
            "A small group of passionate early adopters beats a large indifferent audience.",
            "Speed of iteration is a real competitive advantage for a young company.",
        ],
    ),
    "business": _template(
        hook="The businesses that win this decade will share one surprising habit.",
        sections=[
            "Understanding the fundamentals",
            "Market positioning",
            "Operations and efficiency",
            "Customer relationships",
            "Scaling sustainably",
            "Action steps you can take today",
        ],
        vocabulary=["strategy", "operations", "customer retention", "leadership", "profit margins"],
        filler=[
            "Strong {subject} is usually the difference between growth and stagnation.",
            "Retaining an existing customer costs far less than acquiring a new one.",
            "Clear processes let a team scale without losing quality.",
            "Leaders who communicate priorities clearly get faster execution.",
            "Healthy {subject} give a business room to invest in its future.",
        ],
    ),
}

BUILTIN_ALIASES: dict[str, str] = {
    "personal-finance": "finance",
    "personal_finance": "finance",
    "cryptocurrency": "crypto",
    "ai-technology": "ai",
    "artificial-intelligence": "ai",
    "startup": "startups",
}


class TemplateRegistry:
    """Data-driven category → template registry with alias support."""

    def __init__(
        self,
        templates: Optional[dict[str, ScriptTemplate]] = None,
        aliases: Optional[dict[str, str]] = None,
        default_category: str = DEFAULT_CATEGORY,
    ):
        self._templates = dict(BUILTIN_TEMPLATES if templates is None else templates)
        self._aliases = dict(BUILTIN_ALIASES if aliases is None else aliases)
        if default_category not in self._templates:
            raise ValueError(f"Default category '{default_category}' has no template")
        self.default_category = default_category

    @staticmethod
    def _normalize(category: str) -> str:
        return "-".join((category or "").strip().lower().split())

    def register(self, category: str, template: ScriptTemplate, aliases: tuple[str, ...] = ()) -> None:
        """Add or replace a category template."""
        key = self._normalize(category)
        self._templates[key] = template
        for alias in aliases:
            self._aliases[self._normalize(alias)] = key

    def resolve(self, category: str) -> str:
        """Resolve a category string to a registered key (default when unknown)."""
        key = self._normalize(category)
        key = self._aliases.get(key, key)
        return key if key in self._templates else self.default_category

    def get(self, category: str) -> tuple[str, ScriptTemplate]:
        """Return the resolved key and its template."""
        key = self.resolve(category)
        return key, self._templates[key]

    def is_known(self, category: str) -> bool:
        key = self._normalize(category)
        return self._aliases.get(key, key) in self._templates

    @property
    def categories(self) -> list[str]:
        return sorted(self._templates)
