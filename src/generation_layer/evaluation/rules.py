"""
Pattern tables for the rule-based raters.

Each category has a baseline and a list of rules. A rule is a regex with a
fixed weight:
- positive weight: added when the pattern matches; when it does not match,
  the rule's advice becomes a recommendation
- negative weight: added (subtracted) when the pattern matches, and the
  rule's description becomes an issue

score = clamp(baseline + sum(weights of matched rules), 0, 1) * 100

Two independent tables are shipped: STATIC_ANALYSIS_RULES (structural
signals) and BEST_PRACTICE_RULES (habits and hygiene). Framework-specific
extras are appended when the target framework matches.
"""

import re
from dataclasses import dataclass, field
from typing import Mapping

from generation_layer.models.enums import EvaluationCategory
from generation_layer.models.evaluation import CategoryScore

CQ = EvaluationCategory.CODE_QUALITY
PERF = EvaluationCategory.PERFORMANCE
A11Y = EvaluationCategory.ACCESSIBILITY
SEC = EvaluationCategory.SECURITY


@dataclass(frozen=True)
class Rule:
    """
    One weighted pattern.

    Attributes:
        pattern: Compiled regex searched anywhere in the code
        weight: Contribution on the 0-1 scale (negative for anti-patterns)
        description: What the pattern detects (used as issue text)
        advice: Recommendation when a positive rule does not match
    """

    pattern: re.Pattern
    weight: float
    description: str
    advice: str = ""

    def matches(self, code: str) -> bool:
        return self.pattern.search(code) is not None


def rule(pattern: str, weight: float, description: str, advice: str = "") -> Rule:
    return Rule(re.compile(pattern), weight, description, advice)


@dataclass(frozen=True)
class RuleSet:
    """Baseline plus rules for one category."""

    baseline: float
    rules: tuple[Rule, ...]

    def extended(self, extra: tuple[Rule, ...]) -> "RuleSet":
        return RuleSet(self.baseline, self.rules + extra)

    def score(self, code: str) -> CategoryScore:
        total = self.baseline
        issues: list[str] = []
        recommendations: list[str] = []
        for item in self.rules:
            matched = item.matches(code)
            if matched:
                total += item.weight
                if item.weight < 0:
                    issues.append(item.description)
            elif item.weight > 0 and item.advice:
                recommendations.append(item.advice)

        clamped = min(max(total, 0.0), 1.0)
        return CategoryScore(
            score=round(clamped * 100, 2),
            issues=issues,
            recommendations=recommendations,
        )


@dataclass(frozen=True)
class RuleTable:
    """
    Named set of per-category rules with framework-specific extras.

    Attributes:
        name: Table name (also the rater name)
        categories: RuleSet per category
        framework_rules: Lower-case framework name -> extra rules per category
    """

    name: str
    categories: Mapping[EvaluationCategory, RuleSet]
    framework_rules: Mapping[str, Mapping[EvaluationCategory, tuple[Rule, ...]]] = field(
        default_factory=dict
    )

    def rules_for(self, framework: str) -> dict[EvaluationCategory, RuleSet]:
        extras = self.framework_rules.get(framework.strip().lower(), {})
        return {
            category: ruleset.extended(extras.get(category, ()))
            for category, ruleset in self.categories.items()
        }

    def score(self, code: str, framework: str) -> dict[EvaluationCategory, CategoryScore]:
        return {
            category: ruleset.score(code)
            for category, ruleset in self.rules_for(framework).items()
        }


STATIC_ANALYSIS_RULES = RuleTable(
    name="static_analysis",
    categories={
        CQ: RuleSet(0.0, (
            rule(r"/\*[\s\S]*?\*/", 0.2, "Code documentation", "Document modules and complex logic with block comments"),
            rule(r"\bfunction\s+\w+|\bfun\s+\w+|\bfunc\s+\w+", 0.3, "Function definitions", "Extract logic into named functions"),
            rule(r"\bconst\s+\w+\s*=|\bval\s+\w+\s*=|\blet\s+\w+\s*[:=]", 0.2, "Immutable declarations", "Prefer immutable declarations"),
            rule(r"\blet\s+\w+\s*=|\bvar\s+\w+\s*=", 0.1, "Scoped mutable declarations", "Use block-scoped variables for mutable state"),
        )),
        PERF: RuleSet(0.0, (
            rule(r"useMemo|useCallback|remember\s*[({]|@StateObject", 0.4, "Performance optimizations", "Memoize expensive computations and callbacks"),
            rule(r"React\.memo|@Stable|Equatable", 0.3, "Component memoization", "Memoize pure components to skip re-renders"),
            rule(r"\blazy\(|LazyColumn|LazyVStack|LazyVGrid", 0.3, "Code splitting or lazy rendering", "Lazy-load routes and large lists"),
        )),
        A11Y: RuleSet(0.0, (
            rule(r"aria-|contentDescription|accessibilityLabel", 0.4, "ARIA attributes", "Add ARIA attributes or accessibility labels to interactive elements"),
            rule(r"\balt=", 0.3, "Image alt text", "Give every image meaningful alt text"),
            rule(r"\brole=|semantics\s*\{|accessibilityAddTraits", 0.3, "Semantic roles", "Declare semantic roles for custom controls"),
        )),
        SEC: RuleSet(1.0, (
            rule(r"dangerouslySetInnerHTML", -0.5, "XSS vulnerability: dangerouslySetInnerHTML"),
            rule(r"\beval\(", -0.5, "Code injection risk: eval()"),
            rule(r"\.innerHTML\b", -0.3, "Potential XSS: innerHTML assignment"),
        )),
    },
    framework_rules={
        "react": {
            CQ: (rule(r"useState|useEffect", 0.2, "React hooks usage", "Use hooks for state and side effects"),),
        },
    },
)


BEST_PRACTICE_RULES = RuleTable(
    name="best_practices",
    categories={
        CQ: RuleSet(0.8, (
            rule(r"//\s*TODO", -0.1, "TODO comments left in code"),
            rule(r"console\.log|\bprint\(|Log\.d\(", -0.1, "Debug logging left in production code"),
            rule(r"/\*\*[\s\S]*?\*/|///", 0.2, "Doc comments", "Add doc comments to exported components"),
        )),
        PERF: RuleSet(0.0, (
            rule(r"useMemo|remember\s*\{", 0.3, "Memoization usage", "Memoize derived values"),
            rule(r"useCallback|rememberUpdatedState", 0.3, "Callback memoization", "Memoize callbacks passed to children"),
            rule(r"React\.memo|@Immutable", 0.4, "Component memoization", "Wrap pure components in React.memo"),
        )),
        A11Y: RuleSet(0.3, (
            rule(r"aria-label|contentDescription\s*=|\.accessibilityLabel\(", 0.3, "ARIA labels", "Label icon-only buttons for screen readers"),
            rule(r"tabIndex|focusable|\.focusable\(", 0.2, "Keyboard navigation", "Make custom controls focusable"),
            rule(r"onKeyDown|onKeyUp|onKeyEvent|\.onKeyPress", 0.2, "Keyboard event handlers", "Handle keyboard activation for custom controls"),
        )),
        SEC: RuleSet(0.1, (
            rule(r"sanitize|escape|DOMPurify", 0.4, "Input sanitization", "Sanitize user input before rendering"),
            rule(r"https://", 0.2, "Secure URLs", "Use https:// for all external resources"),
            rule(r"Content-Security-Policy", 0.3, "CSP headers", "Declare a Content-Security-Policy"),
        )),
    },
)
