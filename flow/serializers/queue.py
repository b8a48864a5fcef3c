from rest_framework import serializers

from flow.models import Stage


class QueueQuerySerializer(serializers.Serializer):
    stage = serializers.ChoiceField(choices=Stage.values)
    doctorId = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class BoardQuerySerializer(serializers.Serializer):
    stage = serializers.ChoiceField(choices=Stage.values)
