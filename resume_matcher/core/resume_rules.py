"""
Resume content rule table.

Rules are evaluated top to bottom and the first failing rule rejects the
document. Keep the ordering: cheap length checks first, then the
"this is something else" detectors, then the required sections.

The same structure can be supplied as JSON through RESUME_RULES_FILE:
    [{"name": ..., "kind": ..., "reason": ..., "phrases": [...],
      "patterns": [...], "limit": ...}, ...]
"""

MIN_LENGTH = "min_length"
MAX_LENGTH = "max_length"
REJECT_ANY = "reject_any"
REQUIRE_ANY = "require_any"

JOB_POSTING_PHRASES = [
    "we are seeking", "we are looking for", "join our team", "about the company",
    "role overview", "key responsibilities:", "the ideal candidate", "why join",
    "we offer", "apply now", "send your resume", "years of experience required",
    "salary range:", "compensation:", "equal opportunity employer",
]

ESSAY_REPORT_PHRASES = [
    "in conclusion", "to conclude", "this essay", "this paper", "this report",
    "thesis statement:", "works cited:", "bibliography", "abstract:",
    "methodology:", "this reminded me", "it made me think",
]

CONTACT_PHRASES = ["@", "phone", "linkedin", "github"]
PHONE_PATTERNS = [r"\d{3}[\s.\-]\d{3}[\s.\-]\d{4}"]

WORK_HISTORY_PHRASES = [
    "experience", "employment", "intern", "developer", "engineer", "projects",
    "portfolio", "worked at", "responsible for",
]

EDUCATION_SKILLS_PHRASES = [
    "education", "degree", "university", "college", "bachelor", "master",
    "skills", "technologies", "programming", "certification",
]

DEFAULT_RULES = [
    {
        "name": "too_short",
        "kind": MIN_LENGTH,
        "limit": 100,
        "reason": "Resume content appears too short. Please ensure the file contains a complete resume.",
    },
    {
        "name": "too_long",
        "kind": MAX_LENGTH,
        "limit": 50000,
        "reason": "Resume content is too long. Please upload a standard resume document.",
    },
    {
        "name": "job_posting",
        "kind": REJECT_ANY,
        "phrases": JOB_POSTING_PHRASES,
        "reason": "This looks like a job description, not a resume. Please upload your personal resume instead.",
    },
    {
        "name": "essay_report",
        "kind": REJECT_ANY,
        "phrases": ESSAY_REPORT_PHRASES,
        "reason": "This looks like an essay/report, not a resume. Please upload a professional resume instead.",
    },
    {
        "name": "contact_info",
        "kind": REQUIRE_ANY,
        "phrases": CONTACT_PHRASES,
        "patterns": PHONE_PATTERNS,
        "reason": "Resume is missing contact information (email, phone, LinkedIn or GitHub).",
    },
    {
        "name": "work_history",
        "kind": REQUIRE_ANY,
        "phrases": WORK_HISTORY_PHRASES,
        "reason": "Resume is missing work experience or projects.",
    },
    {
        "name": "education_skills",
        "kind": REQUIRE_ANY,
        "phrases": EDUCATION_SKILLS_PHRASES,
        "reason": "Resume is missing education or skills information.",
    },
]
