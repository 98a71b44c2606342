"""
Centralized AI Prompt Repository
- Keeps prompt wording out of the analyzer and match logic
- The expected JSON shape is mirrored by MatchService validation
"""

RESUME_MATCH_SYSTEM = (
    "You are an expert resume analyzer. Compare the candidate's resume against the job description "
    "and give a specific, actionable assessment of fit."
)

RESUME_MATCH_USER_TEMPLATE = """RESUME:
{resume_text}

JOB DESCRIPTION:
{job_description}

Analyze this resume against the job description and respond with ONLY a valid JSON object in this exact format:

{{
  "matchScore": 85,
  "summary": "Brief 1-2 sentence summary of overall fit",
  "strengths": ["Specific strength 1", "Specific strength 2", "Specific strength 3"],
  "improvements": ["Specific improvement suggestion 1", "Specific improvement suggestion 2"],
  "missingSkills": ["Missing skill 1", "Missing skill 2"]
}}

matchScore is a number from 0 to 100. Return ONLY the raw JSON object, without markdown code blocks or any text before or after it."""


# helper to build prompts
def get_prompt(template: str, **kwargs) -> str:
    return template.format(**kwargs)
