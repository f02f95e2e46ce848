from django.conf import settings

# Short department codes mapped to CMS slugs.
CODE_TO_SLUG = {
    # Department of Applied Science
    "doas": "department-of-applied-science",
    # Department of Architecture
    "doarch": "department-of-architecture",
    # Department of Automobile & Mechanical Engineering
    "doame": "department-of-automobile-and-mechanical-engineering",
    # Department of Civil Engineering
    "doce": "department-of-civil-engineering",
    # Department of Electronics & Computer Engineering
    "doece": "department-of-electronics-and-computer-engineering",
    # Department of Industrial Engineering
    "doie": "department-of-industrial-engineering",
}


def department_slug_from_code(code: str) -> str | None:
    normalized = (code or "").strip().lower()

    # Already a full slug
    if "department-" in normalized:
        return normalized

    return CODE_TO_SLUG.get(normalized)


def current_department_slug() -> str | None:
    """Slug of the department this site is deployed for."""
    return department_slug_from_code(settings.DEPARTMENT_CODE)
