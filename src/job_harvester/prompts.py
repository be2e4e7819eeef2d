from datetime import UTC, datetime

from job_harvester.taxonomy import CATEGORIES

EXTRACTION_TEMPLATE = """html_content = {content}

Extract the job posting above and return ONLY one JSON object, with no commentary,
no markdown and no unknown ASCII values. The JSON structure must be:
{{
    "title": "string",  # "<company> is hiring <role>", plus batch eligibility if mentioned
    "job_id": integer,  # Unique identifier for the job, taken from apply_link if present
    "role": "string",  # Job title or role being offered
    "company": "string",
    "category": "string",  # Exactly one of: {categories}
    "sub_category": "string",  # Exactly one of the sub-categories listed for the chosen category:
{sub_categories}
    "skills": ["string"],  # Required skills (add typical skills for the role if none are mentioned)
    "experience_min": integer,  # Minimum years of experience
    "experience_max": integer,  # Maximum years of experience
    "employment_type": ["string"],  # Based on experience_min and experience_max:
        # - both 0: ["Fresher"]
        # - experience_min > 0: ["Experienced"]
        # - experience_min = 0 and experience_max > 0: ["Fresher", "Experienced"]
    "job_type": ["string"],  # e.g. Remote, Full-Time
    "apply_link": "string",  # URL to apply for the job
    "salary_min": integer,  # Annual minimum salary (convert monthly to annual)
    "salary_max": integer,  # Annual maximum salary (convert monthly to annual)
    "education": ["string"],  # Education qualifications
    "location": ["string"],  # Job location(s)
    "batch": ["string"]  # Eligible batches, calculated from experience as of {year}
}}
"""


def render_taxonomy() -> str:
    return "\n".join(
        f"        #   {category}: {', '.join(subs)}" for category, subs in CATEGORIES.items()
    )


def build_extraction_prompt(content: str, reference_year: int | None = None) -> str:
    """
    Build the instruction sent to the extraction service for one posting.
    Batch eligibility is computed by the service relative to `reference_year`.
    """
    year = reference_year or datetime.now(tz=UTC).year
    return EXTRACTION_TEMPLATE.format(
        content=content,
        categories=", ".join(CATEGORIES),
        sub_categories=render_taxonomy(),
        year=year,
    )
