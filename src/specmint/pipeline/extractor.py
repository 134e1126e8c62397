"""Knowledge extraction from documentation sources.

Each source is fetched and analyzed independently on a bounded thread
pool. A source that fails is recorded on the result and skipped; the
extraction as a whole never fails because of a single source.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Protocol, TypeVar

from specmint.llm.client import ReasoningClient, parse_llm_json_response
from specmint.pipeline.fetcher import DocumentFetcher
from specmint.pipeline.knowledge import (
    BestPractice,
    Concept,
    Configuration,
    ExtractedKnowledge,
    Gotcha,
    Source,
    SourceFailure,
    SourceKnowledge,
)
from specmint.serialization import isoformat, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class DepthLimits:
    max_chars: int  # text budget per source
    max_items: int  # cap per knowledge category


DEPTH_LIMITS: dict[str, DepthLimits] = {
    "basic": DepthLimits(max_chars=5000, max_items=5),
    "standard": DepthLimits(max_chars=15000, max_items=15),
    "comprehensive": DepthLimits(max_chars=40000, max_items=50),
}

SUCCESS_CONFIDENCE = 0.8


@dataclass(frozen=True)
class ExtractionConfig:
    """What to extract and how hard to look."""

    domain: str
    framework: str | None = None
    sources: tuple[str, ...] = ()
    depth: str = "standard"  # "basic" | "standard" | "comprehensive"
    fanout: int = 4

    @property
    def limits(self) -> DepthLimits:
        return DEPTH_LIMITS.get(self.depth, DEPTH_LIMITS["standard"])


class KnowledgeAnalyzer(Protocol):
    """Turns the text of one source into knowledge."""

    def analyze(self, text: str, location: str, config: ExtractionConfig) -> SourceKnowledge: ...


_HEADING_RE = re.compile(r"^(#{1,4})\s+(.+?)\s*#*\s*$")
_FENCE_RE = re.compile(r"^```\s*([\w+-]*)\s*(.*)$")
_FILENAME_RE = re.compile(r"(?:title=)?[\"']?([A-Za-z_][\w./-]*\.[A-Za-z0-9]{1,6})[\"']?")

GOTCHA_KEYWORDS = ("pitfall", "gotcha", "caveat", "warning", "troubleshoot", "common mistake", "avoid")
PRACTICE_KEYWORDS = ("best practice", "recommend", "tip", "guideline", "convention")


@dataclass
class _Section:
    level: int
    title: str
    lines: list[str]
    code: list[tuple[str, str]]  # (fence info, body)

    @property
    def summary(self) -> str:
        text = " ".join(line.strip() for line in self.lines if line.strip())
        return text[:300]


def _split_sections(text: str) -> list[_Section]:
    sections: list[_Section] = []
    current: _Section | None = None
    fence_info: str | None = None
    fence_body: list[str] = []

    for line in text.splitlines():
        fence = _FENCE_RE.match(line.strip())
        if fence_info is not None:
            if line.strip().startswith("```"):
                if current is not None:
                    current.code.append((fence_info, "\n".join(fence_body)))
                fence_info = None
                fence_body = []
            else:
                fence_body.append(line)
            continue
        if fence is not None:
            fence_info = f"{fence.group(1)} {fence.group(2)}".strip()
            continue
        heading = _HEADING_RE.match(line)
        if heading is not None:
            current = _Section(len(heading.group(1)), heading.group(2).strip(), [], [])
            sections.append(current)
        elif current is not None:
            current.lines.append(line)
    return sections


class HeadingKnowledgeAnalyzer:
    """Deterministic analyzer that reads Markdown structure.

    Headings become concepts; sections about pitfalls become gotchas,
    sections with recommendations become best practices, and code blocks
    labelled with a file name become configurations.
    """

    def analyze(self, text: str, location: str, config: ExtractionConfig) -> SourceKnowledge:
        text = text[: config.limits.max_chars]
        concepts: list[Concept] = []
        gotchas: list[Gotcha] = []
        practices: list[BestPractice] = []
        configurations: list[Configuration] = []

        for section in _split_sections(text):
            lowered = section.title.lower()
            if any(k in lowered for k in GOTCHA_KEYWORDS):
                gotchas.append(
                    Gotcha(
                        title=section.title,
                        description=section.summary,
                        impact="high",
                    )
                )
            elif any(k in lowered for k in PRACTICE_KEYWORDS):
                practices.append(
                    BestPractice(
                        title=section.title,
                        description=section.summary,
                        examples=tuple(body for _, body in section.code[:2]),
                    )
                )
            else:
                concepts.append(
                    Concept(
                        name=section.title,
                        description=section.summary,
                        importance="high" if section.level <= 2 else "medium",
                    )
                )
            for info, body in section.code:
                match = _FILENAME_RE.search(info.split(" ", 1)[-1]) if " " in info else None
                if match:
                    configurations.append(
                        Configuration(
                            file=match.group(1),
                            purpose=section.title,
                            examples=(body,),
                        )
                    )

        return SourceKnowledge(
            concepts=tuple(concepts),
            gotchas=tuple(gotchas),
            best_practices=tuple(practices),
            configurations=tuple(configurations),
        )


ANALYSIS_PROMPT = """Analyze this {framework} documentation about {domain} and extract structured knowledge.

Documentation Text:
{text}

Extract the following in JSON format:
{{
  "concepts": [
    {{"name": "Concept name", "description": "What it is", "importance": "critical|high|medium|low", "relatedConcepts": []}}
  ],
  "gotchas": [
    {{"title": "Common mistake", "description": "What goes wrong", "impact": "critical|high|medium|low", "solution": "How to fix it"}}
  ],
  "bestPractices": [
    {{"title": "Practice", "description": "What to do", "category": "setup|configuration|usage|testing", "reasoning": "Why", "examples": []}}
  ],
  "configurations": [
    {{"file": "filename", "purpose": "What this file does", "requiredFields": {{"field": "purpose"}}, "examples": []}}
  ]
}}

Focus on critical setup steps, common mistakes, required configuration, version-specific information and command patterns.

Return ONLY valid JSON."""


class LLMKnowledgeAnalyzer:
    """Analyzer backed by the reasoning service."""

    def __init__(self, client: ReasoningClient, max_tokens: int = 4000) -> None:
        self.client = client
        self.max_tokens = max_tokens

    def analyze(self, text: str, location: str, config: ExtractionConfig) -> SourceKnowledge:
        limit = config.limits.max_chars
        body = text[:limit] + (" ... (truncated)" if len(text) > limit else "")
        prompt = ANALYSIS_PROMPT.format(
            domain=config.domain,
            framework=config.framework or config.domain,
            text=body,
        )
        raw = self.client.complete(prompt, max_tokens=self.max_tokens)
        return SourceKnowledge.from_dict(parse_llm_json_response(raw))


def _dedupe(items: list[T], key: Callable[[T], str], limit: int) -> tuple[T, ...]:
    seen: set[str] = set()
    result: list[T] = []
    for item in items:
        k = key(item).lower()
        if k in seen:
            continue
        seen.add(k)
        result.append(item)
    return tuple(result[:limit])


class Extractor:
    """Extracts knowledge from the sources named in an ExtractionConfig."""

    def __init__(
        self,
        fetcher: DocumentFetcher | None = None,
        analyzer: KnowledgeAnalyzer | None = None,
    ) -> None:
        self.fetcher = fetcher or DocumentFetcher()
        self.analyzer = analyzer or HeadingKnowledgeAnalyzer()

    def extract(self, config: ExtractionConfig) -> ExtractedKnowledge:
        framework = config.framework or config.domain
        logger.info(
            "Extracting %s knowledge from %d source(s) (depth=%s)",
            config.domain,
            len(config.sources),
            config.depth,
        )

        outcomes: list[tuple[Source, SourceKnowledge] | SourceFailure] = []
        if config.sources:
            with ThreadPoolExecutor(max_workers=max(1, config.fanout)) as pool:
                futures = [
                    pool.submit(self._extract_source, location, config)
                    for location in config.sources
                ]
                outcomes = [f.result() for f in futures]

        successes = [o for o in outcomes if not isinstance(o, SourceFailure)]
        failures = tuple(o for o in outcomes if isinstance(o, SourceFailure))
        limit = config.limits.max_items

        knowledge = ExtractedKnowledge(
            domain=config.domain,
            framework=framework,
            concepts=_dedupe(
                [c for _, k in successes for c in k.concepts], lambda c: c.name, limit
            ),
            gotchas=_dedupe(
                [g for _, k in successes for g in k.gotchas], lambda g: g.title, limit
            ),
            best_practices=_dedupe(
                [p for _, k in successes for p in k.best_practices],
                lambda p: p.title,
                limit,
            ),
            configurations=_dedupe(
                [c for _, k in successes for c in k.configurations],
                lambda c: c.file,
                limit,
            ),
            sources=tuple(source for source, _ in successes),
            failures=failures,
            extracted_at=isoformat(utc_now()),
            confidence=SUCCESS_CONFIDENCE if successes else 0.0,
        )
        logger.info(
            "Extracted %d concepts, %d gotchas, %d best practices, %d configurations "
            "(%d source(s) failed)",
            len(knowledge.concepts),
            len(knowledge.gotchas),
            len(knowledge.best_practices),
            len(knowledge.configurations),
            len(failures),
        )
        return knowledge

    def _extract_source(
        self, location: str, config: ExtractionConfig
    ) -> tuple[Source, SourceKnowledge] | SourceFailure:
        try:
            text = self.fetcher.fetch(location)
            knowledge = self.analyzer.analyze(text, location, config)
        except Exception as e:
            logger.warning("Skipping source %s: %s", location, e, exc_info=True)
            return SourceFailure(location=location, error=str(e) or type(e).__name__)
        source = Source(location=location, accessed_at=isoformat(utc_now()))
        return source, knowledge


def extract(
    config: ExtractionConfig, client: ReasoningClient | None = None
) -> ExtractedKnowledge:
    """Extract knowledge, using the reasoning service when a client is given."""
    analyzer = LLMKnowledgeAnalyzer(client) if client is not None else None
    return Extractor(analyzer=analyzer).extract(config)
