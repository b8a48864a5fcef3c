from rest_framework import serializers

from flow.models import Priority


def _vital(source=None):
    return serializers.FloatField(source=source, required=False, allow_null=True)


def _text(source=None):
    return serializers.CharField(
        source=source, max_length=4000, required=False, allow_null=True, allow_blank=True, trim_whitespace=False
    )


class TriageRecordSerializer(serializers.Serializer):
    """camelCase request body mapped onto triage record field names."""
    temperature = _vital()
    systolic = _vital()
    diastolic = _vital()
    heartRate = _vital('heart_rate')
    spo2 = _vital()
    weight = _vital()
    height = _vital()
    symptoms = _text()
    allergies = _text()
    currentMeds = _text('current_meds')
    painScale = serializers.IntegerField(source='pain_scale', required=False, allow_null=True)
    priority = serializers.ChoiceField(choices=Priority.values, required=False, allow_null=True)
    notes = _text()
