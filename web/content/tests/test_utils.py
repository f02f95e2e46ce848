from datetime import datetime, timezone as dt_timezone

from django.test import SimpleTestCase, override_settings

from content import utils
from content.sanitize import sanitize_html
from project.media import build_media_url

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=dt_timezone.utc)


class SlugAndTextTests(SimpleTestCase):
    def test_slugify_title(self):
        self.assertEqual(utils.slugify_title("Tech Fest 2025: Finals!"), "tech-fest-2025-finals")
        self.assertEqual(utils.slugify_title(None), "")

    def test_results_of_handles_every_list_shape(self):
        self.assertEqual(utils.results_of([1]), [1])
        self.assertEqual(utils.results_of({"results": [2]}), [2])
        self.assertEqual(utils.results_of({"results": {"results": [3]}}), [3])
        self.assertEqual(utils.results_of({"detail": "x"}), [])

    def test_split_keywords(self):
        self.assertEqual(utils.split_keywords("AI, robotics ,, IoT"), ["AI", "robotics", "IoT"])

    def test_format_title(self):
        self.assertEqual(utils.format_title("ER"), "Er.")
        self.assertEqual(utils.format_title("mrs"), "Mrs.")
        self.assertEqual(utils.format_title("Prof."), "Prof.")


class FacultyOrderingTests(SimpleTestCase):
    def test_designation_priority_then_display_order(self):
        staff = [
            {"name": "C", "designation": "Lecturer", "displayOrder": 1},
            {"name": "D", "designation": "Deputy Head of Department", "displayOrder": 9},
            {"name": "A", "designation": "Head of Department", "displayOrder": 5},
            {"name": "B", "designation": "Program Coordinator", "displayOrder": 3},
            {"name": "E", "designation": "Lecturer", "displayOrder": 0},
        ]

        self.assertEqual([s["name"] for s in utils.sort_staff(staff)], ["A", "B", "D", "E", "C"])

    def test_split_teachers(self):
        full, part = utils.split_teachers([
            {"name": "A", "teacher_type": "full_time"},
            {"name": "B", "teacher_type": "part_time"},
        ])
        self.assertEqual([t["name"] for t in full], ["A"])
        self.assertEqual([t["name"] for t in part], ["B"])


class EventTimingTests(SimpleTestCase):
    def test_upcoming_uses_end_date_then_start_date(self):
        running = {"eventStartDate": "2025-05-30", "eventEndDate": "2025-06-03"}
        finished = {"eventStartDate": "2025-05-01", "eventEndDate": "2025-05-02"}
        undated = {}

        self.assertTrue(utils.is_upcoming(running, NOW))
        self.assertFalse(utils.is_upcoming(finished, NOW))
        self.assertTrue(utils.is_upcoming(undated, NOW))
        self.assertTrue(utils.is_past(finished, NOW))
        self.assertFalse(utils.is_past(undated, NOW))

    def test_status_label(self):
        self.assertEqual(utils.event_status({"eventEndDate": "2025-05-02"}, NOW), "Finished")
        self.assertEqual(utils.event_status({"eventStartDate": "2025-07-01"}, NOW), "Upcoming")
        self.assertEqual(
            utils.event_status({"eventStartDate": "2025-05-30T09:00:00Z"}, NOW), "Running"
        )


class SubjectGroupingTests(SimpleTestCase):
    def test_semesters_are_ordered_and_archived_classes_dropped(self):
        subjects = [
            {
                "id": 1,
                "name": "Digital Logic",
                "academic_classes": [
                    {"semester": "sem2", "is_published": True},
                    {"semester": "sem2", "is_published": False, "is_archived": True},
                ],
            },
            {
                "id": 2,
                "name": "Old Circuits",
                "academic_classes": [{"semester": "sem10", "is_archived": True}],
            },
            {"id": 3, "name": "Elective", "academic_classes": [{"semester": "elective"}]},
            {
                "id": 4,
                "name": "Archived Maths",
                "academic_classes": [{"semester": "sem2", "is_archived": True}],
            },
        ]

        grouped = utils.group_subjects_by_semester(subjects)

        self.assertEqual([sem for sem, _ in grouped], ["sem2", "sem10", "elective"])
        sem2 = dict(grouped)["sem2"]
        self.assertEqual([e["subject"]["id"] for e in sem2], [1])


class AlumniTests(SimpleTestCase):
    entries = [
        {"full_name": "Sita K", "passed_year": "2022", "program_name": "BEI", "roll_no": "075BEI01"},
        {"given_name": "Hari", "surname": "B", "passed_year": "2022", "program": {"name": "BCT"}},
        {"full_name": "Asha", "passed_year": "2023", "workplace": "Leapfrog"},
        {"full_name": "Bina", "passed_year": "2022", "program_name": "BEI"},
    ]

    def test_filter_by_search_and_year(self):
        self.assertEqual(
            [e["full_name"] for e in utils.filter_alumni(self.entries, "leapfrog")], ["Asha"]
        )
        self.assertEqual(len(utils.filter_alumni(self.entries, "", "2022")), 3)
        self.assertEqual(len(utils.filter_alumni(self.entries, "hari b", "2023")), 0)

    def test_group_by_year_then_program(self):
        grouped = utils.group_alumni(self.entries)

        self.assertEqual([g["passed_year"] for g in grouped], ["2023", "2022"])
        self.assertEqual(grouped[0]["programs"][0]["name"], "Program not specified")
        programs_2022 = grouped[1]["programs"]
        self.assertEqual([p["name"] for p in programs_2022], ["BCT", "BEI"])
        self.assertEqual(
            [m["full_name"] for m in programs_2022[1]["members"]], ["Bina", "Sita K"]
        )


class SanitizeTests(SimpleTestCase):
    def test_removes_active_content(self):
        html = (
            '<p onclick="steal()">Hello <a href="javascript:alert(1)">x</a></p>'
            "<script>alert(1)</script><iframe src='//evil'></iframe>"
        )

        cleaned = sanitize_html(html)

        self.assertEqual(cleaned, "<p>Hello <a>x</a></p>")

    def test_removes_scheme_split_by_whitespace_or_control_characters(self):
        html = (
            '<a href="java&#x09;script:alert(1)">a</a>'
            '<a href="java&#x0A;script:alert(1)">b</a>'
            '<a href=" JavaScript :alert(1)">c</a>'
            '<a href="jav&#x0B;ascript:alert(1)">d</a>'
        )

        self.assertEqual(sanitize_html(html), "<a>a</a><a>b</a><a>c</a><a>d</a>")

    def test_keeps_regular_markup(self):
        self.assertEqual(
            sanitize_html('<a href="/notices">Notices</a>'), '<a href="/notices">Notices</a>'
        )
        self.assertEqual(sanitize_html(None), "")


@override_settings(API_BASE="https://cms.example.edu/")
class MediaUrlTests(SimpleTestCase):
    def test_media_urls(self):
        self.assertEqual(build_media_url("//cdn.example.edu/a.png"), "https://cdn.example.edu/a.png")
        self.assertEqual(build_media_url("https://x.org/a.png"), "https://x.org/a.png")
        self.assertEqual(build_media_url("media/a.png"), "https://cms.example.edu/media/a.png")
        self.assertIsNone(build_media_url(""))
