"""Advisory aggregator - fans a question out to knowledge providers.

The aggregator:
- Validates the query (the only way a call can fail)
- Queries every provider concurrently, each bounded by its own timeout
- Turns any provider exception or timeout into Unavailable
- Merges whatever succeeded, in declared provider order, with attribution
"""

import asyncio
from typing import List, Optional, Sequence

from errors import ValidationError
from logger_config import setup_logger
from providers import Content, Provider, ProviderOutcome, Unavailable, HttpSearchProvider, default_provider_configs
from schemas import AdvisoryResult

logger = setup_logger(__name__, 'advisory.log')

FALLBACK_MESSAGE = (
    "I apologize, but I couldn't find specific information about that from our trusted sources. "
    "Please consult with your pediatrician for personalized medical advice."
)

DISCLAIMER = (
    "\nPlease note: This information is for educational purposes only. "
    "Always consult with your pediatrician for medical advice specific to your baby."
)


def merge_outcomes(names: Sequence[str], outcomes: Sequence[ProviderOutcome]) -> AdvisoryResult:
    """Compose the user-facing answer from per-provider outcomes.

    Args:
        names: Provider names in priority order
        outcomes: One outcome per provider, same order as names

    Returns:
        AdvisoryResult: Labeled blocks plus disclaimer, or the fallback message
    """
    body = ""
    sources: List[str] = []

    for name, outcome in zip(names, outcomes):
        if isinstance(outcome, Content):
            body += f"According to {name}:\n{outcome.text}\n\n"
            sources.append(name)

    if not sources:
        return AdvisoryResult(body=FALLBACK_MESSAGE, sources=[], is_fallback=True)

    return AdvisoryResult(body=body + DISCLAIMER, sources=sources, is_fallback=False)


class AdvisoryAggregator:
    """Answers questions by merging results from several providers."""

    def __init__(self, providers: Sequence[Provider], timeout: Optional[float] = 8.0):
        self.providers = list(providers)
        self.timeout = timeout

    async def _search_one(self, provider: Provider, query: str) -> ProviderOutcome:
        try:
            outcome = await asyncio.wait_for(provider.search(query), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{provider.name} did not answer within {self.timeout}s")
            return Unavailable("timeout")
        except Exception as e:
            logger.warning(f"{provider.name} search failed: {e!r}")
            return Unavailable(f"error: {e!r}")

        if isinstance(outcome, Content) and outcome.text.strip():
            return outcome
        if isinstance(outcome, Unavailable):
            logger.warning(f"{provider.name} unavailable: {outcome.reason}")
            return outcome
        logger.warning(f"{provider.name} returned no usable content")
        return Unavailable("no result")

    async def answer(self, query: Optional[str]) -> AdvisoryResult:
        """Answer a free-text question.

        Raises:
            ValidationError: If query is missing or blank
        """
        if not query or not query.strip():
            raise ValidationError("Query is required")

        outcomes = await asyncio.gather(
            *(self._search_one(provider, query) for provider in self.providers)
        )
        result = merge_outcomes([p.name for p in self.providers], outcomes)

        logger.info(
            f"Answered query with {len(result.sources)}/{len(self.providers)} provider(s)"
            + (" (fallback)" if result.is_fallback else f": {', '.join(result.sources)}")
        )
        return result


def build_aggregator(settings) -> AdvisoryAggregator:
    """Aggregator over the configured HTTP providers."""
    providers = [
        HttpSearchProvider(config, timeout=settings.PROVIDER_TIMEOUT)
        for config in default_provider_configs(settings)
    ]
    return AdvisoryAggregator(providers, timeout=settings.PROVIDER_TIMEOUT)
