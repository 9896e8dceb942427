"""
Built-in requirements templates seeded on first start.

Blueprints use the same snake_case keys that RequirementsTemplate stores.
"""

_PDF = ["pdf"]
_PDF_DOC = ["pdf", "doc", "docx"]

GRADUATE_TEMPLATE = {
    "name": "Graduate School Application",
    "description": "Standard requirements for graduate school applications including documents, test scores, and fees.",
    "category": "graduate",
    "requirements": [
        {
            "requirement_type": "document",
            "category": "academic",
            "name": "Academic Transcripts",
            "description": "Official transcripts from all previous institutions",
            "is_required": True,
            "is_optional": False,
            "document_type": "transcript",
            "max_file_size": 10,
            "allowed_file_types": _PDF,
            "order": 1,
        },
        {
            "requirement_type": "document",
            "category": "personal",
            "name": "Personal Statement",
            "description": "Statement of purpose explaining your academic and career goals",
            "is_required": True,
            "is_optional": False,
            "document_type": "personal_statement",
            "max_file_size": 5,
            "allowed_file_types": _PDF_DOC,
            "word_limit": 1000,
            "order": 2,
        },
        {
            "requirement_type": "document",
            "category": "professional",
            "name": "Curriculum Vitae/Resume",
            "description": "Detailed CV highlighting academic and professional experience",
            "is_required": True,
            "is_optional": False,
            "document_type": "cv",
            "max_file_size": 5,
            "allowed_file_types": _PDF_DOC,
            "order": 3,
        },
        {
            "requirement_type": "document",
            "category": "professional",
            "name": "Letters of Recommendation",
            "description": "Academic or professional letters of recommendation",
            "is_required": True,
            "is_optional": False,
            "document_type": "recommendation_letter",
            "max_file_size": 5,
            "allowed_file_types": _PDF_DOC,
            "order": 4,
        },
        {
            "requirement_type": "test_score",
            "category": "academic",
            "name": "GRE Scores",
            "description": "Graduate Record Examination scores",
            "is_required": True,
            "is_optional": False,
            "test_type": "gre",
            "min_score": 260,
            "max_score": 340,
            "score_format": "260-340 total score",
            "order": 5,
        },
        {
            "requirement_type": "test_score",
            "category": "academic",
            "name": "TOEFL/IELTS Scores",
            "description": "English proficiency test scores (for international students)",
            "is_required": False,
            "is_optional": True,
            "test_type": "toefl",
            "min_score": 80,
            "max_score": 120,
            "score_format": "80+ total score",
            "order": 6,
        },
        {
            "requirement_type": "fee",
            "category": "administrative",
            "name": "Application Fee",
            "description": "Non-refundable application processing fee",
            "is_required": True,
            "is_optional": False,
            "application_fee_amount": 75,
            "application_fee_currency": "USD",
            "application_fee_description": "Standard application fee",
            "order": 7,
        },
        {
            "requirement_type": "interview",
            "category": "professional",
            "name": "Admissions Interview",
            "description": "Interview with admissions committee or faculty",
            "is_required": False,
            "is_optional": True,
            "interview_type": "virtual",
            "interview_duration": 30,
            "interview_notes": "May be required for competitive programs",
            "order": 8,
        },
    ],
}

UNDERGRADUATE_TEMPLATE = {
    "name": "Undergraduate Application",
    "description": "Standard requirements for undergraduate college applications.",
    "category": "undergraduate",
    "requirements": [
        {
            "requirement_type": "document",
            "category": "academic",
            "name": "High School Transcripts",
            "description": "Official high school transcripts",
            "is_required": True,
            "is_optional": False,
            "document_type": "transcript",
            "max_file_size": 10,
            "allowed_file_types": _PDF,
            "order": 1,
        },
        {
            "requirement_type": "document",
            "category": "personal",
            "name": "Personal Essay",
            "description": "Personal statement or college essay",
            "is_required": True,
            "is_optional": False,
            "document_type": "personal_statement",
            "max_file_size": 5,
            "allowed_file_types": _PDF_DOC,
            "word_limit": 650,
            "order": 2,
        },
        {
            "requirement_type": "test_score",
            "category": "academic",
            "name": "SAT/ACT Scores",
            "description": "Standardized test scores",
            "is_required": True,
            "is_optional": False,
            "test_type": "sat",
            "min_score": 1000,
            "max_score": 1600,
            "score_format": "1000+ total score",
            "order": 3,
        },
        {
            "requirement_type": "document",
            "category": "professional",
            "name": "Letters of Recommendation",
            "description": "Teacher or counselor recommendations",
            "is_required": True,
            "is_optional": False,
            "document_type": "recommendation_letter",
            "max_file_size": 5,
            "allowed_file_types": _PDF_DOC,
            "order": 4,
        },
        {
            "requirement_type": "fee",
            "category": "administrative",
            "name": "Application Fee",
            "description": "Non-refundable application processing fee",
            "is_required": True,
            "is_optional": False,
            "application_fee_amount": 50,
            "application_fee_currency": "USD",
            "application_fee_description": "Standard application fee",
            "order": 5,
        },
    ],
}

SCHOLARSHIP_TEMPLATE = {
    "name": "Scholarship Application",
    "description": "Standard requirements for scholarship applications.",
    "category": "scholarship",
    "requirements": [
        {
            "requirement_type": "document",
            "category": "personal",
            "name": "Scholarship Essay",
            "description": "Essay addressing scholarship criteria and personal goals",
            "is_required": True,
            "is_optional": False,
            "document_type": "personal_statement",
            "max_file_size": 5,
            "allowed_file_types": _PDF_DOC,
            "word_limit": 500,
            "order": 1,
        },
        {
            "requirement_type": "document",
            "category": "academic",
            "name": "Academic Transcripts",
            "description": "Current academic transcripts",
            "is_required": True,
            "is_optional": False,
            "document_type": "transcript",
            "max_file_size": 10,
            "allowed_file_types": _PDF,
            "order": 2,
        },
        {
            "requirement_type": "document",
            "category": "professional",
            "name": "Letters of Recommendation",
            "description": "Academic or professional recommendations",
            "is_required": True,
            "is_optional": False,
            "document_type": "recommendation_letter",
            "max_file_size": 5,
            "allowed_file_types": _PDF_DOC,
            "order": 3,
        },
        {
            "requirement_type": "document",
            "category": "financial",
            "name": "Financial Documents",
            "description": "Proof of financial need or income statements",
            "is_required": False,
            "is_optional": True,
            "document_type": "financial_documents",
            "max_file_size": 10,
            "allowed_file_types": _PDF,
            "order": 4,
        },
        {
            "requirement_type": "interview",
            "category": "professional",
            "name": "Scholarship Interview",
            "description": "Interview with scholarship committee",
            "is_required": False,
            "is_optional": True,
            "interview_type": "virtual",
            "interview_duration": 30,
            "interview_notes": "May be required for competitive scholarships",
            "order": 5,
        },
    ],
}

SYSTEM_TEMPLATES = [GRADUATE_TEMPLATE, UNDERGRADUATE_TEMPLATE, SCHOLARSHIP_TEMPLATE]
