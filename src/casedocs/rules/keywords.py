"""Keywords scored by the keyword classifier."""

from __future__ import annotations

from casedocs.rules.base import freeze
from casedocs.typing.enums import DocumentType

KEYWORDS = freeze(
    {
        DocumentType.PASSPORT: (
            "passport",
            "nationality",
            "surname",
            "given names",
            "date of birth",
            "place of birth",
            "date of issue",
            "date of expiry",
            "authority",
            "document no",
            "personal no",
            "type",
            "code",
            "sex",
            "height",
            "color of eyes",
        ),
        DocumentType.VISA: (
            "visa",
            "valid for",
            "number of entries",
            "duration of stay",
            "issued at",
            "valid from",
            "valid until",
            "remarks",
            "type",
            "consulate",
        ),
        DocumentType.RESIDENCE_PERMIT: (
            "residence permit",
            "residence card",
            "permit no",
            "residence",
            "permission to reside",
            "permission to remain",
            "gnib",
            "inis",
            "immigration",
        ),
        DocumentType.BIRTH_CERTIFICATE: (
            "birth certificate",
            "certificate of birth",
            "born on",
            "child",
            "father",
            "mother",
            "parents",
            "registrar",
            "registration district",
        ),
        DocumentType.MARRIAGE_CERTIFICATE: (
            "marriage certificate",
            "certificate of marriage",
            "married on",
            "bride",
            "groom",
            "spouse",
            "witnesses",
            "solemnized",
            "officiant",
        ),
        DocumentType.FINANCIAL: (
            "bank statement",
            "account",
            "balance",
            "transaction",
            "deposit",
            "withdrawal",
            "credit",
            "debit",
            "statement period",
            "opening balance",
            "closing balance",
            "sort code",
            "account number",
            "iban",
            "bic",
        ),
        DocumentType.BANK_STATEMENT: (
            "bank statement",
            "statement of account",
            "statement period",
            "opening balance",
            "closing balance",
            "iban",
            "bic",
            "swift",
            "sort code",
            "account holder",
            "transactions",
        ),
        DocumentType.TAX_DOCUMENT: (
            "tax",
            "revenue",
            "tax year",
            "taxable income",
            "tax paid",
            "tax credit",
            "taxpayer",
            "pps number",
            "assessment",
            "employment detail summary",
            "p60",
        ),
        DocumentType.EMPLOYMENT: (
            "employment contract",
            "employer",
            "employee",
            "salary",
            "wage",
            "position",
            "job title",
            "start date",
            "working hours",
            "probation",
            "termination",
            "notice period",
            "employment letter",
            "job offer",
        ),
        DocumentType.EDUCATION: (
            "diploma",
            "certificate",
            "degree",
            "transcript",
            "university",
            "college",
            "school",
            "academic",
            "qualification",
            "graduate",
            "bachelor",
            "master",
            "phd",
            "doctorate",
            "education",
        ),
        DocumentType.LANGUAGE_CERTIFICATE: (
            "ielts",
            "toefl",
            "cambridge",
            "language",
            "candidate",
            "test report form",
            "overall band score",
            "listening",
            "reading",
            "writing",
            "speaking",
            "cefr",
        ),
        DocumentType.UTILITY_BILL: (
            "bill",
            "utility",
            "electricity",
            "gas",
            "water",
            "internet",
            "broadband",
            "telephone",
            "invoice",
            "account number",
            "customer",
            "payment",
            "due date",
            "meter reading",
            "consumption",
            "period",
        ),
        DocumentType.MEDICAL: (
            "medical",
            "health",
            "doctor",
            "hospital",
            "clinic",
            "patient",
            "diagnosis",
            "treatment",
            "prescription",
            "medication",
            "insurance",
            "healthcare",
            "examination",
            "test results",
            "referral",
        ),
        DocumentType.VACCINATION_CERTIFICATE: (
            "vaccination",
            "vaccine",
            "immunisation",
            "immunization",
            "dose",
            "batch",
            "certificate",
            "booster",
            "administered",
            "manufacturer",
        ),
        DocumentType.DRIVING_LICENSE: (
            "driving licence",
            "driving license",
            "driver",
            "licence number",
            "license number",
            "categories",
            "restrictions",
            "road safety",
            "motor",
            "vehicle",
        ),
        DocumentType.POLICE_CLEARANCE: (
            "police",
            "garda",
            "clearance",
            "vetting",
            "criminal record",
            "certificate of good conduct",
            "no convictions",
            "background check",
            "record",
        ),
        DocumentType.IDENTIFICATION: (
            "identity card",
            "national identity",
            "id card",
            "identification number",
            "id number",
            "card no",
            "date of birth",
            "expiry date",
            "holder",
        ),
        DocumentType.OTHER: (),
    },
    "keywords",
)
