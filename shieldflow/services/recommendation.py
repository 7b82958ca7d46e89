"""
Server recommendations from a hosted Gemini model
"""

import asyncio
import json
import logging
from typing import Optional

from google import genai
from google.genai import types

from ..core.constants import GEMINI_MODEL, FALLBACK_REASON
from ..core.server_catalog import ServerCatalog
from ..core.types import Recommendation

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """
You are an expert VPN routing assistant.
You have access to the following server list: {servers}.
Based on the user's intent (e.g., streaming Netflix, gaming, privacy), recommend the single best server ID.
If the intent is unclear, recommend '{default_id}' by default.
"""

RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        'recommendedServerId': types.Schema(type=types.Type.STRING),
        'reason': types.Schema(
            type=types.Type.STRING,
            description="Short explanation for the user",
        ),
    },
    required=['recommendedServerId', 'reason'],
)


class RecommendationClient:
    """Stateless wrapper; every failure resolves to a fallback value"""

    def __init__(self, catalog: Optional[ServerCatalog] = None,
                 api_key: Optional[str] = None,
                 model: str = GEMINI_MODEL,
                 default_server_id: Optional[str] = None):
        self.catalog = catalog or ServerCatalog()
        self.model = model
        self.default_server_id = default_server_id or self.catalog.default.id
        self.client = genai.Client(api_key=api_key) if api_key else None

    @property
    def fallback(self) -> Recommendation:
        return Recommendation(
            recommended_server_id=self.default_server_id,
            reason=FALLBACK_REASON,
            fallback=True,
        )

    def _system_instruction(self) -> str:
        servers = json.dumps([
            {'id': s.id, 'country': s.country, 'features': list(s.features)}
            for s in self.catalog.get_all_servers()
        ])
        return SYSTEM_PROMPT.format(
            servers=servers, default_id=self.default_server_id
        )

    async def recommend(self, query: str) -> Recommendation:
        """Ask the model for a server; never raises"""
        if not query or not query.strip():
            return self.fallback

        if self.client is None:
            logger.warning("API key not configured, using default server")
            return self.fallback

        config = types.GenerateContentConfig(
            system_instruction=self._system_instruction(),
            response_mime_type='application/json',
            response_schema=RESPONSE_SCHEMA,
        )

        # The SDK call is synchronous; keep it off the event loop
        loop = asyncio.get_running_loop()

        def _call_api():
            return self.client.models.generate_content(
                model=self.model,
                contents=query,
                config=config,
            )

        try:
            response = await loop.run_in_executor(None, _call_api)
            return self._parse(response.text)
        except Exception as e:
            logger.error(f"Gemini API Error: {e}")
            return self.fallback

    def _parse(self, text: Optional[str]) -> Recommendation:
        if not text:
            raise ValueError("empty response")

        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("response is not an object")

        server_id = data.get('recommendedServerId')
        reason = data.get('reason')
        if not isinstance(server_id, str) or not isinstance(reason, str):
            raise ValueError("response is missing required fields")
        if server_id not in self.catalog:
            raise ValueError(f"unknown server id {server_id!r}")

        return Recommendation(recommended_server_id=server_id, reason=reason)
