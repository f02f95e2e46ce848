PROJECT_TYPES = [
    ("minor", "Minor"),
    ("major", "Major"),
    ("research", "Research"),
    ("other", "Other"),
]

RESEARCH_TYPES = [
    ("basic", "Basic"),
    ("applied", "Applied"),
    ("experimental", "Experimental"),
    ("theoretical", "Theoretical"),
    ("review", "Review / Survey"),
    ("case_study", "Case Study"),
    ("other", "Other"),
]

RESEARCH_STATUSES = [
    ("proposed", "Proposed"),
    ("ongoing", "Ongoing"),
    ("completed", "Completed"),
    ("published", "Published"),
    ("cancelled", "Cancelled"),
]

PARTICIPANT_TYPES = [
    ("student", "Student"),
    ("staff", "Faculty / Staff"),
    ("external", "External Collaborator"),
]

CONTACT_CATEGORIES = [
    ("general", "General"),
    ("academic", "Academic"),
    ("admission", "Admission"),
    ("examination", "Examination"),
    ("administration", "Administration"),
    ("research", "Research"),
    ("other", "Other"),
]
