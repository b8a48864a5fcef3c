from rest_framework import serializers

from flow.models import Priority, Stage


class CreateVisitSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    priority = serializers.ChoiceField(choices=Priority.values, required=False, default=Priority.STANDARD)


class AdvanceVisitSerializer(serializers.Serializer):
    toStage = serializers.ChoiceField(choices=Stage.values)
    doctorId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    fromStage = serializers.ChoiceField(choices=Stage.values, required=False, allow_null=True)


class AvailableDoctorsQuerySerializer(serializers.Serializer):
    q = serializers.CharField(max_length=64, required=False, allow_blank=True)
