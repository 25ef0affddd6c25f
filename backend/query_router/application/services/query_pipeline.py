"""Query pipeline — one immutable bundle of stages bound to one Lexicon snapshot.

Flow:
  1. Spell correction  (SpellCorrector)
  2. Entity extraction (EntityExtractor)
  3. Classification    (DomainClassifier → ActionTypeResolver)
  4. Assembly          (ResponseAssembler)

A pipeline never changes after construction; reloading the lexicon means
building a new pipeline and swapping the reference that callers hold.
"""

import time

from query_router.application.services.domain_classifier import DomainClassifier
from query_router.application.services.entity_extractor import EntityExtractor
from query_router.application.services.response_assembler import ResponseAssembler
from query_router.application.services.spell_corrector import SpellCorrector
from query_router.domain.entities import Lexicon, QueryResponse
from query_router.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

plog = PipelineLogger("QueryPipeline")


class QueryPipeline:
    """Runs raw query text through every stage and returns a QueryResponse."""

    def __init__(self, lexicon: Lexicon):
        self.lexicon = lexicon
        self._corrector = SpellCorrector(lexicon)
        self._extractor = EntityExtractor()
        self._classifier = DomainClassifier(lexicon)
        self._assembler = ResponseAssembler(lexicon)

    def run(self, text: str, *, session_id: str | None = None) -> QueryResponse:
        started = time.perf_counter()

        query_text = self._corrector.correct(text)
        if plog.enabled:
            plog.step_complete(
                PipelineStage.SPELL_CHECK,
                query_text.corrected,
                changed=query_text.changed,
            )

        entities = self._extractor.extract(query_text.corrected)
        if plog.enabled:
            plog.step_complete(PipelineStage.EXTRACTION, f"{len(entities)} entities")
            for entity in entities.values():
                plog.detail(f"{entity.attribute} {entity.operator.value} {entity.value}")

        decision = self._classifier.classify(query_text.corrected, entities)
        if plog.enabled:
            plog.step_complete(
                PipelineStage.CLASSIFICATION,
                f"{decision.domain.value} → {decision.action_type.value}",
                reason=decision.reason,
            )

        elapsed_ms = (time.perf_counter() - started) * 1000
        response = self._assembler.assemble(
            query_text,
            decision,
            entities,
            processing_time_ms=elapsed_ms,
            session_id=session_id,
        )
        if plog.enabled:
            plog.step_complete(
                PipelineStage.ASSEMBLY,
                f"{len(response.display_fields)} display fields",
                errors=[code.value for code in response.error_codes()] or "none",
            )
            plog.step_complete(PipelineStage.COMPLETE, f"'{text}' routed")
            plog.stats(
                domain=decision.domain.value,
                action=decision.action_type.value,
                time_ms=response.metadata.processing_time_ms,
            )
        return response
