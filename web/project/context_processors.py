from django.conf import settings

from upstream.departments import current_department_slug

NAVIGATION = [
    ("Home", "content:home"),
    ("About", "content:about"),
    ("Programs", "content:programs"),
    ("Faculty", "content:faculty"),
    ("Events", "content:events"),
    ("Notices", "content:notices"),
    ("Research", "content:research"),
    ("Projects", "content:projects"),
    ("Journal", "content:journal"),
    ("Clubs", "content:clubs"),
    ("Alumni", "content:alumni"),
    ("Downloads", "content:downloads"),
    ("Contact", "content:contact"),
]


def site(request):
    return {
        "department_code": settings.DEPARTMENT_CODE,
        "department_slug": current_department_slug(),
        "navigation": NAVIGATION,
    }
