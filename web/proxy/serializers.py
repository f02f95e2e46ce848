from rest_framework import serializers

from verification.otp import Purpose


class OTPRequestSerializer(serializers.Serializer):
    """Ask upstream to email a submission code."""

    email = serializers.EmailField()
    purpose = serializers.ChoiceField(choices=Purpose.choices)
    full_name = serializers.CharField(required=False, allow_blank=True, max_length=200)


class OTPVerifySerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp_code = serializers.CharField(min_length=4, max_length=6)
    session_id = serializers.CharField()
    purpose = serializers.ChoiceField(choices=Purpose.choices)
