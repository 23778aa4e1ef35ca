"""Network Analyst — asks the analysis collaborator for a short logistics assessment.

Invariants:
    - analyze() never raises: any failure or timeout returns FALLBACK_ANALYSIS
    - The analyst reads a snapshot only; it never touches engine state
    - Payload = facility name, capacity, specialist summary, stock and days of supply

Design Decisions:
    - Snapshot captured before the await: later writes cannot change what is analysed
    - asyncio.wait_for around the client call: retries inside the client stay bounded
      by one overall deadline
"""

import asyncio
import json
import logging

from medsync.core.network_model import Network
from medsync.core.network_snapshot import analysis_payload
from medsync.infrastructure.anthropic_client import ResilientAnthropicClient

logger = logging.getLogger(__name__)

FALLBACK_ANALYSIS = "System Offline. AI Analysis unavailable."

_SYSTEM_PROMPT = (
    "Role: Crisis Logistics Expert.\n"
    "Context: Active crisis zone. Data blackout imminent."
)

_PROMPT_TEMPLATE = """Task: Analyze the following hospital inventory and staffing data.

Data: {data}

Output Requirement:
1. Identify the SINGLE most critical shortage or staffing bottleneck (name the specialist type if staffing is critical).
2. Suggest one immediate logistical movement.
3. Keep it under 50 words. Concise, military style sitrep.

Format: Plain text."""


def build_prompt(network: Network) -> str:
    data = json.dumps(analysis_payload(network), ensure_ascii=False)
    return _PROMPT_TEMPLATE.format(data=data)


def _extract_text(response: object) -> str:
    parts = [
        b.text for b in getattr(response, "content", [])
        if getattr(b, "type", None) == "text"
    ]
    return "\n".join(parts).strip()


class NetworkAnalyst:
    """Fallible, non-blocking boundary around the analysis collaborator."""

    def __init__(
        self,
        client: ResilientAnthropicClient,
        model: str,
        max_tokens: int = 300,
        timeout_seconds: float = 30.0,
    ) -> None:
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

    async def analyze(self, network: Network) -> str:
        """Return a free-text assessment, or FALLBACK_ANALYSIS on any failure."""
        prompt = build_prompt(network)
        try:
            response = await asyncio.wait_for(
                self.client.create_message(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    system=_SYSTEM_PROMPT,
                    messages=[{"role": "user", "content": prompt}],
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error("Network analysis timed out")
            return FALLBACK_ANALYSIS
        except Exception as e:
            logger.error("Network analysis failed: %s", e, exc_info=True)
            return FALLBACK_ANALYSIS

        text = _extract_text(response)
        if not text:
            logger.warning("Network analysis returned no text")
            return FALLBACK_ANALYSIS
        return text
