"""Gemini API client for entry summaries and tags."""

import json
import re
from typing import Any

import httpx

from lumina_journal.config import Settings
from lumina_journal.core import AiAnalysis, LLMClient

FALLBACK_SUMMARY = "Could not generate summary at this time."
FALLBACK_TAGS = ["Reading"]
MAX_TAGS = 5

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {
            "type": "STRING",
            "description": "A concise summary of the reading notes.",
        },
        "tags": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "A list of 3-5 relevant tags.",
        },
    },
    "required": ["summary", "tags"],
}


def fallback_analysis() -> AiAnalysis:
    return AiAnalysis(summary=FALLBACK_SUMMARY, tags=list(FALLBACK_TAGS))


class GeminiClient(LLMClient):
    """Gemini API client implementation."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.api_key = settings.gemini_api_key
        self.model = settings.gemini.model
        self.temperature = settings.gemini.temperature
        self.base_url = settings.gemini.base_url
        self.timeout = settings.gemini.timeout

    async def analyze_entry(self, title: str, content: str) -> AiAnalysis:
        """Summarize notes and propose tags, or return the fixed fallback."""
        if not self.api_key:
            print("⚠️  GEMINI_API_KEY not set, using fallback summary")
            return fallback_analysis()

        prompt_template = self.settings.prompts.analysis.get("user", "")
        system_prompt = self.settings.prompts.analysis.get("system", "")
        prompt = prompt_template.format(title=title, content=content)

        try:
            response = await self._call_api(prompt=prompt, system=system_prompt)
        except (httpx.HTTPError, AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            print(f"⚠️  Error calling Gemini: {type(e).__name__}: {e}")
            return fallback_analysis()

        if not response.strip():
            print("⚠️  No response text received from Gemini")
            return fallback_analysis()

        json_text = self._extract_json(response)

        try:
            return self._parse_analysis(json.loads(json_text))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            print(f"  ⚠️  Gemini returned invalid JSON: {type(e).__name__}: {e}")
            print(f"     Response: {response[:200]}...")
            return fallback_analysis()

    def _parse_analysis(self, data: Any) -> AiAnalysis:
        """Validate the {summary, tags} object."""
        if not isinstance(data, dict):
            raise TypeError("Expected a JSON object")

        summary = data["summary"]
        raw_tags = data["tags"]
        if not isinstance(summary, str) or not summary.strip():
            raise ValueError("Summary must be a non-empty string")
        if not isinstance(raw_tags, list):
            raise TypeError("Tags must be a list")

        tags: list[str] = []
        for tag in raw_tags:
            text = str(tag).strip()
            if text and text not in tags:
                tags.append(text)
        # Short lists are kept as returned; only an empty one is malformed
        if not tags:
            raise ValueError("No usable tags")

        return AiAnalysis(summary=summary.strip(), tags=tags[:MAX_TAGS])

    async def _call_api(self, prompt: str, system: str) -> str:
        """Call Gemini generateContent once. No retries."""
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/models/{self.model}:generateContent",
                headers={
                    "x-goog-api-key": self.api_key,
                    "content-type": "application/json",
                },
                json=payload,
            )
            response.raise_for_status()

            data = response.json()
            parts = data["candidates"][0]["content"].get("parts", [])
            return "".join(part.get("text", "") for part in parts)

    def _fix_json(self, text: str) -> str:
        """Try to fix common JSON issues."""
        # Remove trailing commas before } or ]
        text = re.sub(r',(\s*[}\]])', r'\1', text)
        return text

    def _extract_json(self, text: str) -> str:
        """Extract JSON from markdown code block or raw text."""
        # Strategy 1: JSON in markdown code block
        code_block_match = re.search(r'```(?:json)?\s*\n(.*?)\n```', text, re.DOTALL)
        if code_block_match:
            return self._fix_json(code_block_match.group(1).strip())

        # Strategy 2: the whole text is already the object
        stripped = text.strip()
        if stripped.startswith("{"):
            candidate = self._fix_json(stripped)
            try:
                json.loads(candidate)
                return candidate
            except json.JSONDecodeError:
                pass

        # Strategy 3: first object embedded in prose
        json_object_match = re.search(r'\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}', text, re.DOTALL)
        if json_object_match:
            candidate = self._fix_json(json_object_match.group(0))
            try:
                json.loads(candidate)
                return candidate
            except json.JSONDecodeError:
                pass

        # Strategy 4: return as is
        return self._fix_json(stripped)
