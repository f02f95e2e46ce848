from django.test import SimpleTestCase

from submissions.forms import ParticipantForm, ProjectForm


class UrlFieldTests(SimpleTestCase):
    def test_scheme_less_links_default_to_https(self):
        form = ProjectForm(
            data={
                "title": "Smart Grid Monitor",
                "abstract": "Monitoring feeder load.",
                "description": "Full write-up.",
                "project_type": "major",
                "supervisor_name": "Dr. Sharma",
                "submitted_by_name": "Asha Rai",
                "github_url": "github.com/asha/grid",
                "demo_url": "http://demo.example.org",
            }
        )

        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data["github_url"], "https://github.com/asha/grid")
        self.assertEqual(form.cleaned_data["demo_url"], "http://demo.example.org")

    def test_participant_linkedin_url(self):
        form = ParticipantForm(
            data={"participant_type": "student", "linkedin_url": "linkedin.com/in/asha"}
        )

        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data["linkedin_url"], "https://linkedin.com/in/asha")
