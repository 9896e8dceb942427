"""
Enum definitions for database models
"""
import enum


class RequirementType(str, enum.Enum):
    """Kind of checklist item; selects which type-specific fields apply"""
    DOCUMENT = "document"        # documentType, file limits, word/character limits
    TEST_SCORE = "test_score"    # testType, score range
    FEE = "fee"                  # applicationFee amount/currency/description
    INTERVIEW = "interview"      # interviewType, duration, notes
    OTHER = "other"


class RequirementCategory(str, enum.Enum):
    """Grouping used for summaries"""
    ACADEMIC = "academic"
    FINANCIAL = "financial"
    PERSONAL = "personal"
    PROFESSIONAL = "professional"
    ADMINISTRATIVE = "administrative"


class RequirementStatus(str, enum.Enum):
    """Requirement lifecycle status"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    WAIVED = "waived"
    NOT_APPLICABLE = "not_applicable"


# Statuses that count towards progress
DONE_STATUSES = frozenset({
    RequirementStatus.COMPLETED,
    RequirementStatus.WAIVED,
    RequirementStatus.NOT_APPLICABLE,
})

# Statuses that still need work from the applicant
OPEN_STATUSES = frozenset({
    RequirementStatus.PENDING,
    RequirementStatus.IN_PROGRESS,
})


class RequirementNecessity(str, enum.Enum):
    """Derived from the isRequired/isOptional flag pair"""
    REQUIRED = "required"
    OPTIONAL = "optional"
    CONDITIONAL = "conditional"  # neither flag set


class DocumentType(str, enum.Enum):
    PERSONAL_STATEMENT = "personal_statement"
    CV = "cv"
    TRANSCRIPT = "transcript"
    RECOMMENDATION_LETTER = "recommendation_letter"
    TEST_SCORES = "test_scores"
    PORTFOLIO = "portfolio"
    FINANCIAL_DOCUMENTS = "financial_documents"
    OTHER = "other"


class TestType(str, enum.Enum):
    __test__ = False  # not a pytest test class

    TOEFL = "toefl"
    IELTS = "ielts"
    GRE = "gre"
    GMAT = "gmat"
    SAT = "sat"
    ACT = "act"
    OTHER = "other"


class InterviewType(str, enum.Enum):
    IN_PERSON = "in-person"
    VIRTUAL = "virtual"
    PHONE = "phone"
    MULTIPLE = "multiple"


class TemplateCategory(str, enum.Enum):
    """Requirements template categories"""
    GRADUATE = "graduate"
    UNDERGRADUATE = "undergraduate"
    SCHOLARSHIP = "scholarship"
    CUSTOM = "custom"


class ApplicationStatus(str, enum.Enum):
    """Application lifecycle status"""
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    WAITLISTED = "waitlisted"
    WITHDRAWN = "withdrawn"
