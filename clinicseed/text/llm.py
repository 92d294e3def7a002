"""Optional LLM-backed text source for clinical notes and prescriptions.

Calls an Ollama-compatible ``/api/generate`` endpoint and falls back to the
template composer whenever the service is unreachable, errors, or returns
empty text. Exposes the same interface as ``TemplateComposer``.
"""

import logging
import os
from typing import Optional

import requests

from clinicseed.data.schema import Diagnosis
from clinicseed.text import templates
from clinicseed.text.compose import PrescriptionText, TemplateComposer, capitalize_first

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "neural-chat"


def build_instructions_prompt(dosage: str, medication_name: str) -> str:
    return (
        "You are a licensed physician writing prescription instructions. "
        f"Write concise, clinical, and medically accurate instructions for {medication_name} {dosage}. "
        "Include: route of administration, frequency, and any relevant precautions. "
        "Keep to 1-2 sentences. Use professional medical language."
    )


def build_note_prompt(age: int, gender: str, medication_name: str, diagnosis: Diagnosis) -> str:
    return (
        "You are a physician documenting a clinical visit. "
        f"Write a concise clinical note for a {age}-year-old {gender} patient with "
        f"{diagnosis.description} managed on {medication_name}. "
        "Use two sections with the literal headers 'ASSESSMENT:' and 'PLAN:'. "
        "The assessment covers current status, vital signs, symptom control and medication tolerance. "
        "The plan covers medication continuation, monitoring intervals and follow-up. "
        f"End the plan with 'Medication: {medication_name}.' Keep under 150 words."
    )


class OllamaComposer:
    """Text composer that asks a local LLM first and templates second."""

    def __init__(
        self,
        fallback: TemplateComposer,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
        timeout: float = 60,
        session: Optional[requests.Session] = None,
    ):
        self.fallback = fallback
        self.base_url = (base_url or os.environ.get("OLLAMA_URL", DEFAULT_OLLAMA_URL)).rstrip("/")
        self.model = model or os.environ.get("OLLAMA_MODEL", DEFAULT_OLLAMA_MODEL)
        self.temperature = temperature
        self.timeout = timeout
        self.session = session or requests.Session()
        self.calls = 0
        self.fallbacks = 0

    def generate(self, prompt: str) -> Optional[str]:
        """Return generated text, or None when the service can't provide any."""
        self.calls += 1
        try:
            response = self.session.post(
                f"{self.base_url}/api/generate",
                json={
                    "model": self.model,
                    "prompt": prompt,
                    "stream": False,
                    "options": {"temperature": self.temperature},
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            text = (response.json().get("response") or "").strip()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Ollama generation failed ({self.model}): {e}")
            return None
        return text or None

    def compose_prescription_instructions(self, dosage: str, medication_name: str = "") -> str:
        text = self.generate(build_instructions_prompt(dosage, medication_name))
        if text is None:
            self.fallbacks += 1
            return self.fallback.compose_prescription_instructions(dosage, medication_name)
        return text

    def compose_prescription_with_frequency(self, dosage: str, medication_name: str = "") -> PrescriptionText:
        frequency = self.fallback.sampler.uniform_choice(templates.FREQUENCY_PHRASES)
        instructions = self.compose_prescription_instructions(dosage, medication_name)
        return PrescriptionText(instructions=instructions, frequency=capitalize_first(frequency))

    def compose_clinical_note(self, age: int, gender: str, medication_name: str, diagnosis: Diagnosis) -> str:
        text = self.generate(build_note_prompt(age, gender, medication_name, diagnosis))
        if text is None:
            self.fallbacks += 1
            return self.fallback.compose_clinical_note(age, gender, medication_name, diagnosis)
        return text
