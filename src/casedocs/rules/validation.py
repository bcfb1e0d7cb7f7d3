"""Validation rules per document type."""

from __future__ import annotations

from casedocs.processing.dates import (
    Predicate,
    all_of,
    is_valid_date,
    matches,
    min_length,
    not_expired,
    not_older_than,
)
from casedocs.rules.base import ValidationRule, freeze
from casedocs.typing.enums import DocumentType

FINANCIAL_RECENCY_MONTHS = 3
UTILITY_RECENCY_MONTHS = 3
TAX_RECENCY_MONTHS = 18
LANGUAGE_RECENCY_MONTHS = 24
POLICE_RECENCY_MONTHS = 6

_NAME_OK = min_length(2)
_UNEXPIRED = all_of(is_valid_date, not_expired)


def _required(field: str, message: str, validator: Predicate | None = None) -> ValidationRule:
    return ValidationRule(field=field, required=True, message=message, validator=validator)


def _optional(field: str, message: str, validator: Predicate | None = None) -> ValidationRule:
    return ValidationRule(field=field, required=False, message=message, validator=validator)


def _recent(months: int) -> Predicate:
    return all_of(is_valid_date, not_older_than(months))


VALIDATION_RULES = freeze(
    {
        DocumentType.PASSPORT: (
            _required("passportNumber", "Passport number is invalid or missing", matches(r"[A-Z0-9]{6,10}")),
            _required("surname", "Surname is invalid or missing", _NAME_OK),
            _required("givenNames", "Given names are invalid or missing", _NAME_OK),
            _required("dateOfBirth", "Date of birth is invalid or missing", is_valid_date),
            _required("dateOfExpiry", "Passport is expired or expiry date is invalid", _UNEXPIRED),
            _required("nationality", "Nationality is missing"),
        ),
        DocumentType.VISA: (
            _required("visaNumber", "Visa number is invalid or missing", matches(r"[A-Z0-9]{6,12}")),
            _required("validUntil", "Visa is expired or expiry date is invalid", _UNEXPIRED),
            _required("visaType", "Visa type is missing"),
        ),
        DocumentType.RESIDENCE_PERMIT: (
            _required("permitNumber", "Permit number is invalid or missing", matches(r"[A-Z0-9]{6,12}")),
            _required("fullName", "Full name is invalid or missing", _NAME_OK),
            _required("validUntil", "Residence permit is expired or expiry date is invalid", _UNEXPIRED),
        ),
        DocumentType.BIRTH_CERTIFICATE: (
            _required("fullName", "Full name is invalid or missing", _NAME_OK),
            _required("dateOfBirth", "Date of birth is invalid or missing", is_valid_date),
            _required("registrationNumber", "Registration number is missing"),
            _optional("fatherName", "Father's name is invalid", _NAME_OK),
            _optional("motherName", "Mother's name is invalid", _NAME_OK),
        ),
        DocumentType.MARRIAGE_CERTIFICATE: (
            _required("spouseName1", "First spouse name is invalid or missing", _NAME_OK),
            _required("spouseName2", "Second spouse name is invalid or missing", _NAME_OK),
            _required("dateOfMarriage", "Date of marriage is invalid or missing", is_valid_date),
            _required("registrationNumber", "Registration number is missing"),
        ),
        DocumentType.FINANCIAL: (
            _required("accountHolder", "Account holder name is invalid or missing", _NAME_OK),
            _required("accountNumber", "Account number is missing"),
            _required(
                "statementDate",
                f"Statement date is invalid, missing, or older than {FINANCIAL_RECENCY_MONTHS} months",
                _recent(FINANCIAL_RECENCY_MONTHS),
            ),
            _optional("balance", "Balance information is missing"),
        ),
        DocumentType.BANK_STATEMENT: (
            _required("accountHolder", "Account holder name is invalid or missing", _NAME_OK),
            _required("accountNumber", "Account number is missing"),
            _required("statementPeriod", "Statement period is missing"),
            _required("closingBalance", "Closing balance is missing"),
        ),
        DocumentType.TAX_DOCUMENT: (
            _required("taxpayerName", "Taxpayer name is invalid or missing", _NAME_OK),
            _required("taxpayerId", "Taxpayer ID is missing"),
            _required("taxYear", "Tax year is missing"),
            _required(
                "issueDate",
                f"Issue date is invalid, missing, or older than {TAX_RECENCY_MONTHS} months",
                _recent(TAX_RECENCY_MONTHS),
            ),
        ),
        DocumentType.EMPLOYMENT: (
            _required("employeeName", "Employee name is invalid or missing", _NAME_OK),
            _required("employerName", "Employer name is invalid or missing", _NAME_OK),
            _required("position", "Position/job title is missing"),
            _required("startDate", "Start date is invalid or missing", is_valid_date),
        ),
        DocumentType.EDUCATION: (
            _required("studentName", "Student name is invalid or missing", _NAME_OK),
            _required("institutionName", "Institution name is invalid or missing", _NAME_OK),
            _required("qualification", "Qualification is missing"),
            _required("graduationDate", "Graduation date is invalid or missing", is_valid_date),
        ),
        DocumentType.LANGUAGE_CERTIFICATE: (
            _required("candidateName", "Candidate name is invalid or missing", _NAME_OK),
            _required("language", "Language is missing"),
            _required("testName", "Test name is missing"),
            _required("overallScore", "Overall score is missing"),
            _required(
                "testDate",
                f"Test date is invalid, missing, or older than {LANGUAGE_RECENCY_MONTHS} months",
                _recent(LANGUAGE_RECENCY_MONTHS),
            ),
            _optional("validUntil", "Certificate has expired or expiry date is invalid", _UNEXPIRED),
        ),
        DocumentType.UTILITY_BILL: (
            _required("customerName", "Customer name is invalid or missing", _NAME_OK),
            _required("billingAddress", "Billing address is missing"),
            _required(
                "billDate",
                f"Bill date is invalid, missing, or older than {UTILITY_RECENCY_MONTHS} months",
                _recent(UTILITY_RECENCY_MONTHS),
            ),
            _required("amount", "Bill amount is missing"),
        ),
        DocumentType.MEDICAL: (
            _required("patientName", "Patient name is invalid or missing", _NAME_OK),
            _required("doctorName", "Doctor name is invalid or missing", _NAME_OK),
            _required("treatmentDate", "Treatment date is invalid or missing", is_valid_date),
        ),
        DocumentType.VACCINATION_CERTIFICATE: (
            _required("patientName", "Patient name is invalid or missing", _NAME_OK),
            _required("dateOfBirth", "Date of birth is invalid or missing", is_valid_date),
            _required("vaccineType", "Vaccine type is missing"),
            _required("vaccinationDate", "Vaccination date is invalid or missing", is_valid_date),
        ),
        DocumentType.DRIVING_LICENSE: (
            _required("licenseNumber", "License number is missing"),
            _required("fullName", "Full name is invalid or missing", _NAME_OK),
            _required("dateOfBirth", "Date of birth is invalid or missing", is_valid_date),
            _required("expiryDate", "License has expired or expiry date is invalid", _UNEXPIRED),
        ),
        DocumentType.POLICE_CLEARANCE: (
            _required("fullName", "Full name is invalid or missing", _NAME_OK),
            _required("dateOfBirth", "Date of birth is invalid or missing", is_valid_date),
            _required(
                "issueDate",
                f"Issue date is invalid, missing, or older than {POLICE_RECENCY_MONTHS} months",
                _recent(POLICE_RECENCY_MONTHS),
            ),
            _required("result", "Result/record information is missing"),
        ),
        DocumentType.IDENTIFICATION: (
            _required("idNumber", "ID number is missing"),
            _required("fullName", "Full name is invalid or missing", _NAME_OK),
            _required("dateOfBirth", "Date of birth is invalid or missing", is_valid_date),
            _required("expiryDate", "ID has expired or expiry date is invalid", _UNEXPIRED),
        ),
        DocumentType.OTHER: (
            _optional("documentTitle", "Document title is missing"),
            _optional("date", "Date is invalid", is_valid_date),
            _optional("name", "Name is invalid", _NAME_OK),
        ),
    },
    "validation",
)
