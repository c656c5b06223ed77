from decimal import Decimal

from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from duetypes.models import DueType


class DueTypeSerializer(serializers.ModelSerializer):
    name = serializers.CharField(
        required=True,
        validators=[UniqueValidator(queryset=DueType.objects.all())],
    )
    description = serializers.CharField(
        required=False, allow_blank=True, allow_null=True
    )
    standard_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )

    class Meta:
        model = DueType
        fields = (
            "name",
            "description",
            "standard_amount",
            "is_active",
            "created_at",
            "updated_at",
            "reference",
        )
