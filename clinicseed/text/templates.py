"""Fragment pools for clinical notes and prescriptions, plus the diagnosis catalog.

Pools are plain append-only lists. The composer picks one entry per pool,
so adding entries here widens variety without touching composition logic.
"""

from clinicseed.data.schema import Diagnosis

# =============================================================================
# Clinical Note Fragments
# =============================================================================

OPENINGS = [
    "Routine follow-up visit.",
    "Follow-up for chronic condition management.",
    "Established patient visit for medication management.",
    "Acute care visit for symptom review.",
    "Scheduled follow-up to assess treatment response.",
    "Post-hospitalization follow-up visit.",
    "Annual review of ongoing conditions.",
    "Same-day visit for new concerns.",
    "Telephone follow-up converted to in-person visit.",
    "Visit to review recent laboratory results.",
    "Medication reconciliation visit.",
    "Interval visit following dose adjustment.",
    "Pre-procedure evaluation visit.",
]

CHIEF_COMPLAINTS = [
    "Patient reports no new complaints.",
    "Patient reports mild intermittent symptoms.",
    "Patient reports improvement since last visit.",
    "Patient reports persistent symptoms despite therapy.",
    "Patient reports occasional side effects.",
    "Patient notes increased fatigue over the past month.",
    "Patient reports symptoms worse in the mornings.",
    "Patient denies fever, chills, or chest pain.",
    "Patient reports intermittent dizziness on standing.",
    "Patient reports difficulty sleeping.",
    "Patient reports good adherence to the medication regimen.",
    "Patient reports new onset headaches.",
    "Patient concerned about long-term prognosis.",
]

FINDINGS = [
    "Vital signs stable. Physical exam unremarkable.",
    "BP within target range. Heart and lungs clear.",
    "No peripheral edema. Cardiac exam normal.",
    "Respiratory exam notable for mild wheeze.",
    "Localized tenderness without erythema.",
    "Afebrile. Abdomen soft, non-tender.",
    "Heart regular rhythm with no murmurs.",
    "No focal neurological deficits.",
    "Skin warm and dry, no rashes noted.",
    "Mildly elevated BP on repeat measurement.",
    "Weight stable since last visit.",
    "Lungs clear to auscultation bilaterally.",
    "Reduced range of motion with mild crepitus.",
]

MEDICATION_EFFECTS = [
    "Medication well tolerated.",
    "Patient reports occasional GI upset.",
    "No adverse effects reported.",
    "Patient notes mild dizziness initially, now resolved.",
    "Therapy adherence reported as good.",
    "Patient reports missed doses over the weekend.",
    "Mild drowsiness reported after evening dose.",
    "Symptoms partially controlled on current dose.",
    "No drug interactions identified on review.",
    "Patient reports dry mouth, tolerable.",
    "Good symptomatic response to therapy.",
    "Patient requests a simpler dosing schedule.",
]

PLAN_ACTIONS = [
    "Continue current medication.",
    "Increase dose as tolerated.",
    "Add adjunctive therapy for symptom control.",
    "Obtain labs to monitor therapy.",
    "Provide a 90-day refill and schedule follow-up.",
    "Reduce dose and reassess in clinic.",
    "Discussed lifestyle modifications including diet and exercise.",
    "Order imaging to further evaluate symptoms.",
    "Switch to an alternative agent within the same class.",
    "Reviewed warning signs and when to seek care.",
    "Referral placed for physical therapy.",
    "Maintain present regimen with home monitoring.",
]

FOLLOW_UPS = [
    "Return in 3 months for routine follow-up.",
    "Return PRN for worsening symptoms.",
    "Recheck labs in 6-8 weeks.",
    "Follow-up by phone in 2 weeks to review results.",
    "Specialist referral if no improvement.",
    "Return in 6 weeks to reassess dosing.",
    "Annual follow-up unless symptoms change.",
    "Return in 1 month with home readings.",
    "Follow-up after imaging is completed.",
    "Nurse visit in 2 weeks for vitals check.",
    "Return sooner if symptoms worsen.",
    "Schedule follow-up in 4-6 months.",
]

# =============================================================================
# Prescription Fragments
# =============================================================================

# Route phrases take the dosage as their only argument
ROUTE_PHRASES = [
    "Take {dosage} by mouth",
    "Apply {dosage} topically",
    "Use {dosage} inhalation",
    "Administer {dosage} subcutaneously",
    "Take {dosage} chewable",
    "Take {dosage} with food",
    "Take {dosage} with a full glass of water",
    "Dissolve {dosage} under the tongue",
    "Instill {dosage} in the affected eye",
    "Apply {dosage} patch to clean, dry skin",
    "Take {dosage} on an empty stomach",
    "Inject {dosage} intramuscularly",
]

FREQUENCY_PHRASES = [
    "once daily",
    "twice daily",
    "three times daily",
    "four times daily",
    "at bedtime",
    "every morning",
    "every 4 hours",
    "every 6 hours",
    "every 8 hours",
    "every 12 hours",
    "once weekly",
    "as needed",
]

CAUTION_CLAUSE = "Avoid alcohol and monitor for side effects"

# =============================================================================
# Diagnosis Catalog
# =============================================================================

DIAGNOSES = [
    Diagnosis("I10", "Essential hypertension", True),
    Diagnosis("E11", "Type 2 diabetes mellitus", True),
    Diagnosis("I50", "Heart failure", True),
    Diagnosis("J45", "Asthma", True),
    Diagnosis("E78", "Hyperlipidemia", True),
    Diagnosis("M79.3", "Myalgia", False),
    Diagnosis("J06", "Acute upper respiratory infection", False),
    Diagnosis("M54.5", "Low back pain", False),
    Diagnosis("E04", "Thyroid disorder", True),
    Diagnosis("F41", "Anxiety disorder", True),
    Diagnosis("M25.5", "Joint pain (arthralgia)", True),
    Diagnosis("K21", "Gastroesophageal reflux disease (GERD)", True),
    Diagnosis("F32", "Major depressive disorder", True),
    Diagnosis("I25", "Chronic ischemic heart disease", True),
    Diagnosis("E66", "Obesity", True),
    Diagnosis("J44", "Chronic obstructive pulmonary disease (COPD)", True),
    Diagnosis("M17", "Osteoarthritis of knee", True),
    Diagnosis("E10", "Type 1 diabetes mellitus", True),
    Diagnosis("G89", "Pain, unspecified", False),
    Diagnosis("R06", "Abnormalities of breathing", False),
    Diagnosis("N18", "Chronic kidney disease", True),
    Diagnosis("L89", "Pressure ulcer", False),
    Diagnosis("B34", "Viral infection, unspecified", False),
    Diagnosis("R51", "Headache", False),
    Diagnosis("J30", "Allergic rhinitis", True),
    Diagnosis("E05", "Hyperthyroidism", True),
    Diagnosis("I20", "Angina pectoris", True),
    Diagnosis("M19", "Osteoarthritis, unspecified", True),
    Diagnosis("F10", "Alcohol use disorder", True),
    Diagnosis("G47", "Sleep disorder", True),
    Diagnosis("K80", "Cholelithiasis (gallstones)", True),
    Diagnosis("R50", "Fever", False),
    Diagnosis("J12", "Viral pneumonia", False),
    Diagnosis("E89", "Postprocedural endocrine disorder", True),
    Diagnosis("I63", "Cerebral infarction (stroke)", True),
    Diagnosis("I48", "Atrial fibrillation", True),
    Diagnosis("N39.0", "Urinary tract infection", False),
    Diagnosis("L20", "Atopic dermatitis", True),
    Diagnosis("L40", "Psoriasis", True),
    Diagnosis("L70", "Acne", False),
    Diagnosis("H66", "Otitis media", False),
    Diagnosis("J02", "Acute pharyngitis", False),
    Diagnosis("K59.0", "Constipation", False),
    Diagnosis("G43", "Migraine", True),
    Diagnosis("D50", "Iron deficiency anemia", False),
    Diagnosis("E55", "Vitamin D deficiency", False),
    Diagnosis("M81", "Osteoporosis", True),
    Diagnosis("F90", "Attention-deficit hyperactivity disorder", True),
    Diagnosis("R10", "Abdominal pain", False),
    Diagnosis("S93.4", "Ankle sprain", False),
]
