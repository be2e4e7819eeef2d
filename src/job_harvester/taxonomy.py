"""
Fixed category / sub-category taxonomy every stored job must belong to.
The same table is rendered into the extraction prompt.
"""

CATEGORIES: dict[str, list[str]] = {
    "Software Development": [
        "Frontend",
        "Backend",
        "Full Stack",
        "Android",
        "iOS",
        "Game Development",
        "Embedded Systems",
    ],
    "DevOps & Cloud Engineering": [
        "DevOps Engineer",
        "Cloud Engineer",
        "Site Reliability Engineer (SRE)",
        "Kubernetes Engineer",
    ],
    "AI/ML": [
        "Data Scientist",
        "Machine Learning Engineer",
        "AI Engineer",
        "Deep Learning Engineer",
    ],
    "Cybersecurity": [
        "Cybersecurity Engineer",
        "Ethical Hacker",
        "SOC Analyst",
        "Security Architect",
    ],
    "Database & Infrastructure": [
        "Database Administrator (DBA)",
        "Data Engineer",
        "Cloud Database Engineer",
    ],
    "Testing & Quality Assurance (QA)": [
        "Manual Tester",
        "Automation Tester",
        "Performance Tester",
        "Security Tester",
    ],
    "IT Support & System Administration": [
        "IT Support Engineer",
        "System Administrator",
        "Help Desk Technician",
    ],
    "Business & Product Management": [
        "Product Development",
        "Business Analyst",
        "Scrum Master",
    ],
    "UI/UX Design": ["UI Designer", "UX Designer", "Graphic Designer"],
    "Blockchain": [
        "Blockchain Developer",
        "Smart Contract Developer",
        "Web3 Engineer",
    ],
    "Non-Tech": ["Tech Recruiter", "IT Sales", "Technical Writer"],
    "Other": ["Other"],
}


def is_valid_category(category: str) -> bool:
    return category in CATEGORIES


def is_valid_sub_category(category: str, sub_category: str) -> bool:
    return sub_category in CATEGORIES.get(category, [])
