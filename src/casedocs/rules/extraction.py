"""Field extraction patterns per document type.

Each rule is matched case-insensitively against the whole recognized text. Value
groups for names and places stay on one line so a label on the next line is never
swallowed.
"""

from __future__ import annotations

import re

from casedocs.processing.normalization import (
    collapse_whitespace,
    normalize_date,
    normalize_gender,
    strip_whitespace,
    to_upper,
)
from casedocs.rules.base import ExtractionRule, PostProcessor, freeze
from casedocs.typing.enums import DocumentType

_SEP = r"[\s.:]*"
# A label must not run into another letter, so "no" never matches inside "November".
_LABEL_END = r"(?:(?<=#)|(?![a-z]))"

DATE = r"(\d{4}[./-]\d{1,2}[./-]\d{1,2}|\d{1,2}[ \t./-]\d{1,2}[ \t./-]\d{2,4})"
NAME = r"([A-Za-z][A-Za-z \t'-]*)"
PLACE = r"([A-Za-z][A-Za-z \t,'-]*)"
CODE = r"([A-Z0-9][A-Z0-9-]*)"
TEXT = r"([A-Za-z0-9][A-Za-z0-9 \t.,#/'-]*)"
WORDS = r"([A-Za-z0-9][A-Za-z0-9 \t./-]*)"
AMOUNT = r"([€$£]?[ \t]?\d[\d,]*[.,]\d{2})"


def _rule(field: str, labels: str, value: str, post: PostProcessor | None = None) -> ExtractionRule:
    pattern = re.compile(rf"\b(?:{labels}){_LABEL_END}{_SEP}{value}", re.IGNORECASE)
    return ExtractionRule(field=field, pattern=pattern, post_process=post)


def _date(field: str, labels: str) -> ExtractionRule:
    return _rule(field, labels, DATE, normalize_date)


def _name(field: str, labels: str) -> ExtractionRule:
    return _rule(field, labels, NAME, collapse_whitespace)


def _code(field: str, labels: str, value: str = CODE) -> ExtractionRule:
    return _rule(field, labels, value, to_upper)


def _amount(field: str, labels: str) -> ExtractionRule:
    return _rule(field, labels, AMOUNT, collapse_whitespace)


_DOB = r"date\s*of\s*birth|birth\s*date|dob"
_CERTIFICATE_NUMBER = r"certificate\s*number|reference\s*number|ref\s*no"
_AUTHORITY = r"issuing\s*authority|authority|issued\s*by"
_REGISTRATION_NUMBER = r"registration\s*number|registration\s*no|reg\s*no"
_ACCOUNT_NUMBER = r"account\s*number|account\s*no|a/c\s*no"

EXTRACTION_RULES = freeze(
    {
        DocumentType.PASSPORT: (
            _code("passportNumber", r"passport\s*(?:number|no|#)", r"([A-Z0-9]{6,10})\b"),
            _name("surname", r"surnames?"),
            _name("givenNames", r"given\s*names?"),
            _date("dateOfBirth", _DOB),
            _rule("placeOfBirth", r"place\s*of\s*birth|birth\s*place", PLACE, collapse_whitespace),
            _date("dateOfIssue", r"date\s*of\s*issue|issued\s*on"),
            _date("dateOfExpiry", r"date\s*of\s*expiry|expiry\s*date|expiration|valid\s*until"),
            _name("authority", r"authority|issued\s*by"),
            _name("nationality", r"nationality"),
            _rule("gender", r"sex|gender", r"(male|female|m|f)\b", normalize_gender),
        ),
        DocumentType.VISA: (
            _code("visaNumber", r"visa\s*number|visa\s*no|visa", r"([A-Z0-9]{6,12})\b"),
            _code("visaType", r"type|category", r"([A-Z0-9-]{1,5})\b"),
            _date("validFrom", r"valid\s*from|from|issued\s*on"),
            _date("validUntil", r"valid\s*until|until|expiry|expiration"),
            _rule("numberOfEntries", r"number\s*of\s*entries|entries", WORDS, collapse_whitespace),
            _rule("issuedAt", r"issued\s*at|place\s*of\s*issue", PLACE, collapse_whitespace),
        ),
        DocumentType.RESIDENCE_PERMIT: (
            _code("permitNumber", r"permit\s*number|permit\s*no|card\s*no", r"([A-Z0-9]{6,12})\b"),
            _name("fullName", r"full\s*name|name"),
            _date("dateOfBirth", _DOB),
            _date("validFrom", r"valid\s*from|from|issued\s*on"),
            _date("validUntil", r"valid\s*until|until|expiry|expiration"),
            _rule("permitType", r"type|category", WORDS, collapse_whitespace),
        ),
        DocumentType.BIRTH_CERTIFICATE: (
            _name("fullName", r"name\s*of\s*child|child['’]?s\s*name|name"),
            _date("dateOfBirth", r"date\s*of\s*birth|born\s*on"),
            _rule("placeOfBirth", r"place\s*of\s*birth|born\s*at|born\s*in", PLACE, collapse_whitespace),
            _name("fatherName", r"father['’]?s\s*name|father"),
            _name("motherName", r"mother['’]?s\s*name|mother"),
            _code("registrationNumber", _REGISTRATION_NUMBER),
            _date("registrationDate", r"registration\s*date|registered\s*on|date\s*of\s*registration"),
        ),
        DocumentType.MARRIAGE_CERTIFICATE: (
            _name("spouseName1", r"bride|wife|spouse\s*1|first\s*spouse"),
            _name("spouseName2", r"groom|husband|spouse\s*2|second\s*spouse"),
            _date("dateOfMarriage", r"date\s*of\s*marriage|married\s*on"),
            _rule(
                "placeOfMarriage",
                r"place\s*of\s*marriage|married\s*at|married\s*in",
                PLACE,
                collapse_whitespace,
            ),
            _code("registrationNumber", _REGISTRATION_NUMBER),
            _name("officiantName", r"officiant|celebrant|solemnized\s*by"),
        ),
        DocumentType.FINANCIAL: (
            _name("accountHolder", r"account\s*holder|name"),
            _code("accountNumber", _ACCOUNT_NUMBER),
            _date("statementDate", r"statement\s*date|date"),
            _amount("balance", r"closing\s*balance|balance"),
            _name("institution", r"financial\s*institution|bank"),
        ),
        DocumentType.BANK_STATEMENT: (
            _name("accountHolder", r"account\s*holder|name"),
            _code("accountNumber", _ACCOUNT_NUMBER),
            _code(
                "iban",
                r"iban|international\s*bank\s*account\s*number",
                r"([A-Z]{2}\d{2}(?:[ \t]?[A-Z0-9]){10,30})",
            ),
            _code("bic", r"bic|swift|bank\s*identifier\s*code", r"([A-Z0-9]{8}(?:[A-Z0-9]{3})?)\b"),
            _rule("statementPeriod", r"statement\s*period|period", WORDS, collapse_whitespace),
            _amount("openingBalance", r"opening\s*balance"),
            _amount("closingBalance", r"closing\s*balance"),
        ),
        DocumentType.TAX_DOCUMENT: (
            _name("taxpayerName", r"taxpayer\s*name|taxpayer|name"),
            _code("taxpayerId", r"tax\s*id|pps\s*number|social\s*security|tin"),
            _rule("taxYear", r"tax\s*year|year", r"(\d{4}(?:[ \t]*[/-][ \t]*\d{2,4})?)", strip_whitespace),
            _amount("taxableIncome", r"taxable\s*income|income"),
            _amount("taxPaid", r"tax\s*paid|total\s*tax"),
            _date("issueDate", r"issue\s*date|date"),
        ),
        DocumentType.EMPLOYMENT: (
            _name("employeeName", r"employee\s*name|employee|name"),
            _name("employerName", r"employer|company"),
            _name("position", r"position|job\s*title|role"),
            _date("startDate", r"start\s*date|commencement\s*date|employment\s*date"),
            _amount("salary", r"salary|wage|compensation"),
            _name("contractType", r"contract\s*type|employment\s*type"),
        ),
        DocumentType.EDUCATION: (
            _name("studentName", r"student\s*name|student|name"),
            _name("institutionName", r"institution|university|college|school"),
            _name("qualification", r"qualification|degree|diploma"),
            _date("graduationDate", r"graduation\s*date|completion\s*date|date"),
            _rule("grade", r"grade|classification|class", WORDS, collapse_whitespace),
        ),
        DocumentType.LANGUAGE_CERTIFICATE: (
            _name("candidateName", r"candidate\s*name|candidate|name"),
            _name("language", r"test\s*language|language"),
            _name("testName", r"test\s*name|examination|exam|test"),
            _rule(
                "overallScore",
                r"overall\s*band\s*score|overall\s*score|score|result",
                WORDS,
                collapse_whitespace,
            ),
            _date("testDate", r"test\s*date|date\s*of\s*test|examination\s*date"),
            _code("certificateNumber", _CERTIFICATE_NUMBER),
            _date("validUntil", r"valid\s*until|expiry\s*date"),
        ),
        DocumentType.UTILITY_BILL: (
            _name("customerName", r"customer\s*name|customer|bill\s*to|name"),
            _code("accountNumber", r"account\s*number|account\s*no|customer\s*id"),
            _rule("billingAddress", r"billing\s*address|address", TEXT, collapse_whitespace),
            _date("billDate", r"bill\s*date|invoice\s*date|date"),
            _date("dueDate", r"due\s*date|payment\s*due"),
            _amount("amount", r"amount\s*due|total\s*due|total\s*amount"),
            _name("utilityType", r"utility\s*type|service"),
        ),
        DocumentType.MEDICAL: (
            _name("patientName", r"patient\s*name|patient|name"),
            _name("doctorName", r"doctor|physician|practitioner"),
            _rule("diagnosis", r"diagnosis|condition", TEXT, collapse_whitespace),
            _date("treatmentDate", r"treatment\s*date|date\s*of\s*treatment|date"),
            _name("medicalFacility", r"hospital|clinic|facility|centre|center"),
        ),
        DocumentType.VACCINATION_CERTIFICATE: (
            _name("patientName", r"patient\s*name|patient|name"),
            _date("dateOfBirth", _DOB),
            _rule("vaccineType", r"vaccine\s*type|vaccine|vaccination", TEXT, collapse_whitespace),
            _date("vaccinationDate", r"vaccination\s*date|date\s*of\s*vaccination|date"),
            _code("certificateNumber", _CERTIFICATE_NUMBER),
            _name("issuer", r"issuer|issued\s*by|authority"),
        ),
        DocumentType.DRIVING_LICENSE: (
            _code("licenseNumber", r"license\s*number|licence\s*number|no"),
            _name("fullName", r"full\s*name|name"),
            _date("dateOfBirth", _DOB),
            _date("issueDate", r"issue\s*date|date\s*of\s*issue"),
            _date("expiryDate", r"expiry\s*date|valid\s*until"),
            _rule(
                "categories",
                r"categories|category|class",
                r"([A-Z0-9][A-Z0-9 \t,+]*)",
                collapse_whitespace,
            ),
            _name("issuingAuthority", _AUTHORITY),
        ),
        DocumentType.POLICE_CLEARANCE: (
            _name("fullName", r"full\s*name|name"),
            _date("dateOfBirth", _DOB),
            _code("certificateNumber", _CERTIFICATE_NUMBER),
            _date("issueDate", r"issue\s*date|date\s*of\s*issue"),
            _name("issuingAuthority", _AUTHORITY),
            _name("result", r"criminal\s*record|result|record"),
        ),
        DocumentType.IDENTIFICATION: (
            _code("idNumber", r"id\s*number|identification\s*number|no"),
            _name("fullName", r"full\s*name|name"),
            _date("dateOfBirth", _DOB),
            _date("issueDate", r"issue\s*date|date\s*of\s*issue"),
            _date("expiryDate", r"expiry\s*date|valid\s*until"),
            _name("issuingAuthority", _AUTHORITY),
        ),
        DocumentType.OTHER: (
            _rule("documentTitle", r"document\s*title|title", TEXT, collapse_whitespace),
            _date("date", r"date"),
            _name("name", r"full\s*name|name"),
            _code("referenceNumber", r"reference|ref|number|no"),
        ),
    },
    "extraction",
)
