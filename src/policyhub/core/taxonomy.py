"""Default policy taxonomy seeded into every new organization.

The lists are tailored for UK small and medium-sized enterprises. They are
stored as organization settings and can be edited by admins afterwards.
"""

from dataclasses import dataclass
from typing import Any

# Canonical setting keys. The underscore spellings were written by an older
# back-fill job and are renamed to these by the defaults migrator.
POLICY_CATEGORIES_KEY = "policy.categories"
POLICY_DEPARTMENTS_KEY = "policy.departments"
POLICY_TAGS_KEY = "policy.tags"

LEGACY_SETTING_KEYS: dict[str, str] = {
    "policy_categories": POLICY_CATEGORIES_KEY,
    "policy_departments": POLICY_DEPARTMENTS_KEY,
    "policy_tags": POLICY_TAGS_KEY,
}

DEFAULT_POLICY_CATEGORIES: list[str] = [
    "Human Resources",
    "Information Technology & Security",
    "Health & Safety",
    "Finance & Expenses",
    "Operations & Conduct",
    "Legal & Compliance",
    "Data Protection & Privacy",
]

DEFAULT_DEPARTMENTS: list[str] = [
    "Executive / Leadership",
    "Human Resources",
    "IT",
    "Finance",
    "Operations",
    "Sales & Marketing",
    "Legal",
    "Product & Engineering",
]

DEFAULT_POLICY_TAGS: list[str] = [
    # Human Resources
    "recruitment",
    "onboarding",
    "offboarding",
    "performance management",
    "annual leave",
    "sick leave",
    "parental leave",
    "employee benefits",
    "pension",
    "payroll",
    "training and development",
    "employee relations",
    "grievance",
    "disciplinary",
    "diversity and inclusion",
    "employee wellbeing",
    "remote working",
    "flexible working",
    # Information Technology & Security
    "acceptable use",
    "cybersecurity",
    "password policy",
    "data security",
    "software management",
    "hardware management",
    "network security",
    "bring your own device (BYOD)",
    "incident response",
    "information classification",
    "access control",
    # Health & Safety
    "workplace safety",
    "fire safety",
    "first aid",
    "display screen equipment (DSE)",
    "mental health at work",
    "accident reporting",
    "risk assessment",
    "lone working",
    # Finance & Expenses
    "expense claims",
    "procurement",
    "purchasing",
    "invoicing",
    "budgeting",
    "corporate card usage",
    "anti-money laundering (AML)",
    # Operations & Conduct
    "code of conduct",
    "dress code",
    "internal communications",
    "social media usage",
    "company property",
    "business travel",
    "confidentiality",
    "conflict of interest",
    # Legal & Compliance
    "GDPR",
    "anti-bribery and corruption",
    "whistleblowing",
    "equal opportunity",
    "modern slavery statement",
    "intellectual property",
    "records management",
    # Data Protection & Privacy
    "data privacy",
    "data retention",
    "subject access request (SAR)",
    "data breach notification",
    "privacy impact assessment (PIA)",
]


@dataclass(frozen=True)
class DefaultSetting:
    """A setting every organization must carry."""

    key: str
    value: Any
    description: str


def default_settings() -> list[DefaultSetting]:
    """Return the default taxonomy settings, with fresh list copies."""
    return [
        DefaultSetting(
            key=POLICY_CATEGORIES_KEY,
            value=list(DEFAULT_POLICY_CATEGORIES),
            description="Default policy categories for the organization.",
        ),
        DefaultSetting(
            key=POLICY_DEPARTMENTS_KEY,
            value=list(DEFAULT_DEPARTMENTS),
            description="Default departments for the organization.",
        ),
        DefaultSetting(
            key=POLICY_TAGS_KEY,
            value=list(DEFAULT_POLICY_TAGS),
            description="Default policy tags for the organization.",
        ),
    ]
