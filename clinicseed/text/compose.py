"""Template-based text composition for prescriptions and clinical notes.

Builds prescription instructions and two-section (ASSESSMENT / PLAN) notes by
picking one fragment from each pool in ``templates``. Pure Python and fast,
so it is the default text source for seeding runs.
"""

from dataclasses import dataclass

from clinicseed.data.sampling import Sampler
from clinicseed.data.schema import Diagnosis
from clinicseed.text import templates

# Probability of appending the alcohol/side-effect caution
CAUTION_PROBABILITY = 0.15


@dataclass(frozen=True)
class PrescriptionText:
    """Instructions sentence plus the structured frequency field."""

    instructions: str
    frequency: str


def format_route(route: str, dosage: str) -> str:
    """Fill the dosage argument of a route phrase."""
    return route.format(dosage=dosage)


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


class TemplateComposer:
    """Composes text from the fragment pools using a shared sampler."""

    def __init__(self, sampler: Sampler):
        self.sampler = sampler

    def compose_prescription_instructions(self, dosage: str, medication_name: str = "") -> str:
        """One sentence: route with dosage, frequency, optional target and caution."""
        base = format_route(self.sampler.uniform_choice(templates.ROUTE_PHRASES), dosage)
        frequency = self.sampler.uniform_choice(templates.FREQUENCY_PHRASES)
        caution = self.sampler.chance(CAUTION_PROBABILITY)

        sentence = f"{base} {frequency}"
        if medication_name:
            sentence += f" for {medication_name}"
        if caution:
            sentence += f". {templates.CAUTION_CLAUSE}"
        return sentence + "."

    def compose_prescription_with_frequency(self, dosage: str, medication_name: str = "") -> PrescriptionText:
        """Instructions plus a separately sampled, capitalized frequency.

        The frequency inside the instructions and the structured frequency are
        independent draws and can disagree.
        """
        frequency = self.sampler.uniform_choice(templates.FREQUENCY_PHRASES)
        instructions = self.compose_prescription_instructions(dosage, medication_name)
        return PrescriptionText(instructions=instructions, frequency=capitalize_first(frequency))

    def compose_clinical_note(self, age: int, gender: str, medication_name: str, diagnosis: Diagnosis) -> str:
        """ASSESSMENT and PLAN sections built from one fragment per pool."""
        choice = self.sampler.uniform_choice
        opening = choice(templates.OPENINGS)
        complaint = choice(templates.CHIEF_COMPLAINTS)
        finding = choice(templates.FINDINGS)
        effect = choice(templates.MEDICATION_EFFECTS)
        action = choice(templates.PLAN_ACTIONS)
        follow_up = choice(templates.FOLLOW_UPS)

        assessment = (
            f"{opening} {age}-year-old {gender} with {diagnosis.description}. "
            f"{complaint} {finding} {effect}"
        )
        plan = f"{action} {follow_up} Medication: {medication_name}."
        return f"ASSESSMENT:\n{assessment}\n\nPLAN:\n{plan}"
