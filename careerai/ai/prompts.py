"""Prompt templates for resume parsing and document generation."""

import json
from typing import Any, Dict

RESUME_PARSE_SYSTEM_PROMPT = """You are a resume parsing expert. Extract ALL structured information from the resume text and return it as JSON with these fields:
{
  "name": "Full name",
  "email": "Email address",
  "phone": "Phone number",
  "address": "Complete address if available",
  "linkedin": "LinkedIn profile URL if available",
  "website": "Personal website/portfolio URL if available",
  "title": "Current or most recent job title",
  "summary": "Professional summary/objective",
  "experience": [{"title": "Job title", "company": "Company name", "location": "Job location", "duration": "Employment duration", "description": ["Bullet point 1", "Bullet point 2"], "technologies": ["tech1", "tech2"]}],
  "education": [{"degree": "Degree", "school": "Institution", "location": "School location", "year": "Graduation year", "gpa": "GPA if mentioned"}],
  "skills": ["skill1", "skill2"],
  "certifications": [{"name": "Certification name", "issuer": "Issuing organization", "date": "Date obtained"}],
  "projects": [{"name": "Project name", "description": "Project description", "technologies": ["tech1"], "url": "Project URL if available"}],
  "awards": [{"name": "Award name", "issuer": "Issuing organization", "date": "Date received"}],
  "publications": [{"title": "Publication title", "journal": "Journal/Conference name", "date": "Publication date"}],
  "languages": [{"language": "Language name", "proficiency": "Proficiency level"}],
  "volunteer": [{"organization": "Organization name", "role": "Volunteer role", "duration": "Duration", "description": "Volunteer description"}],
  "additional_sections": [{"section_title": "Section name", "content": "Section content"}]
}

Instructions:
- Extract ALL information present in the resume, don't skip any sections
- If a field is not present, omit it from the JSON (no empty arrays or null values)
- Preserve the original date formats
- Experience "description" MUST be an array of strings, one responsibility or achievement per element, each starting with an action verb
- "skills" MUST be a flat array of individual skill strings
- Return ONLY valid JSON. No markdown code blocks, no text before or after."""


RESUME_GENERATE_SYSTEM_PROMPT = """You are an expert resume writer who tailors resumes to job descriptions.
Write an ATS-friendly resume in plain text using only facts from the candidate's resume data.
Emphasise the experience and skills most relevant to the target role. Do not invent employers, dates, degrees or certifications."""


COVER_LETTER_SYSTEM_PROMPT = """You are an expert career coach who writes concise, specific cover letters.
Write 3-4 paragraphs, under 400 words, in plain text. Use only facts from the candidate's resume data and
connect them to concrete requirements of the job description. No placeholders such as [Company]."""


def build_resume_parse_prompt(text: str) -> str:
    return f"Parse this resume text:\n\n{text}"


def _describe_job(job_description: Dict[str, Any], company_name: str) -> str:
    return json.dumps(
        {"company": company_name, **(job_description or {})},
        indent=2,
        default=str,
    )


def build_resume_prompt(
    resume_data: Dict[str, Any],
    job_description: Dict[str, Any],
    user_name: str,
    company_name: str,
) -> str:
    return f"""Tailor a resume for {user_name} applying to {company_name}.

JOB DESCRIPTION:
{_describe_job(job_description, company_name)}

CANDIDATE RESUME DATA:
{json.dumps(resume_data or {}, indent=2, default=str)}

Return the complete resume text only."""


def build_cover_letter_prompt(
    resume_data: Dict[str, Any],
    job_description: Dict[str, Any],
    user_name: str,
    company_name: str,
) -> str:
    return f"""Write a cover letter from {user_name} to {company_name}.

JOB DESCRIPTION:
{_describe_job(job_description, company_name)}

CANDIDATE RESUME DATA:
{json.dumps(resume_data or {}, indent=2, default=str)}

Sign the letter as {user_name}. Return the letter text only."""
