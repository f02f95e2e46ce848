from django.test import SimpleTestCase

from verification.digits import OtpDigits, ResendCooldown


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class OtpDigitsTests(SimpleTestCase):
    def test_paste_keeps_only_first_six_digits(self):
        digits = OtpDigits()

        focus = digits.paste("12-34 5678")

        self.assertEqual(digits.slots, ["1", "2", "3", "4", "5", "6"])
        self.assertEqual(digits.code, "123456")
        self.assertTrue(digits.is_complete)
        self.assertEqual(focus, 5)

    def test_short_paste_fills_leading_slots(self):
        digits = OtpDigits()

        focus = digits.paste("a4b2")

        self.assertEqual(digits.slots, ["4", "2", "", "", "", ""])
        self.assertEqual(focus, 2)
        self.assertFalse(digits.is_complete)

    def test_type_keeps_last_digit_and_advances(self):
        digits = OtpDigits()

        self.assertEqual(digits.type(0, "79"), 1)
        self.assertEqual(digits.slots[0], "9")
        self.assertEqual(digits.type(5, "3"), 5)

    def test_type_non_digit_clears_slot_without_advancing(self):
        digits = OtpDigits(["1"])

        self.assertEqual(digits.type(0, "x"), 0)
        self.assertEqual(digits.slots[0], "")

    def test_backspace_on_empty_slot_moves_back(self):
        digits = OtpDigits(["1", ""])

        self.assertEqual(digits.backspace(1), 0)
        self.assertEqual(digits.backspace(0), 0)
        self.assertEqual(OtpDigits(["1", "2"]).backspace(1), 1)

    def test_from_post_reads_digit_fields_and_pasted_code(self):
        data = {f"digit_{i}": str(i) for i in range(6)}
        self.assertEqual(OtpDigits.from_post(data).code, "012345")
        self.assertEqual(OtpDigits.from_post({"code": "987 654"}).code, "987654")


class ResendCooldownTests(SimpleTestCase):
    def test_disabled_right_after_resend_and_enabled_after_sixty_seconds(self):
        clock = FakeClock()
        storage = {}
        cooldown = ResendCooldown(storage, "a@tcioe.edu.np:project_submission", seconds=60, clock=clock)

        self.assertTrue(cooldown.is_ready)
        cooldown.start()
        self.assertFalse(cooldown.is_ready)
        self.assertEqual(cooldown.remaining(), 60)

        clock.advance(59.5)
        self.assertFalse(cooldown.is_ready)
        self.assertEqual(cooldown.remaining(), 1)

        clock.advance(0.5)
        self.assertTrue(cooldown.is_ready)
        self.assertEqual(cooldown.remaining(), 0)
