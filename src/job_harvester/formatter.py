from job_harvester.models import JobRecord

NOT_SPECIFIED = "Not specified"


class JobFormatter:
    """
    Formats a JobRecord into the human-readable announcement stored in `message`.
    """

    HEADER = "This message has been sent by a bot."
    SKILLS_PER_LINE = 3

    @staticmethod
    def join_or_default(values: list[str], default: str = NOT_SPECIFIED) -> str:
        cleaned = [v.strip() for v in values if v and v.strip()]
        return ", ".join(cleaned) if cleaned else default

    @staticmethod
    def format_experience(job: JobRecord) -> str:
        if job.experience_min == 0 and job.experience_max == 0:
            return "0"
        return f"{job.experience_min} - {job.experience_max}"

    @staticmethod
    def format_salary(job: JobRecord) -> str:
        if job.salary_min == 0 and job.salary_max == 0:
            return "Not disclosed"
        return f"₹{job.salary_min:,} - ₹{job.salary_max:,} per year"

    @classmethod
    def format_skills(cls, skills: list[str]) -> list[str]:
        """Group skills three per bullet line."""
        cleaned = [s.strip() for s in skills if s and s.strip()]
        if not cleaned:
            return [f"- {NOT_SPECIFIED}"]
        return [
            "- " + ", ".join(cleaned[i : i + cls.SKILLS_PER_LINE])
            for i in range(0, len(cleaned), cls.SKILLS_PER_LINE)
        ]

    @classmethod
    def format_message(cls, job: JobRecord) -> str:
        """
        Formats the job into the announcement layout:
        header, role/location/salary block, eligibility, skills, apply link.
        """
        lines = [
            cls.HEADER,
            "",
            f"{job.company} is Hiring! 🚀",
            "",
            f"💼 Role: {job.role}",
            f"📍 Location: {cls.join_or_default(job.location)}",
            f"💰 Salary Range: {cls.format_salary(job)}",
            "",
            "✨ Eligibility:",
            f"- {cls.join_or_default(job.education)}",
            f"- Batch: {cls.join_or_default(job.batch)}",
            f"- Experience: {cls.format_experience(job)} years",
            "",
            "🛠 Skills:",
            *cls.format_skills(job.skills),
            "",
            f"📄 View Full Job Details & Apply: {job.apply_link}",
        ]
        return "\n".join(lines)
