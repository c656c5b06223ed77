from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework import serializers

from duetypes.models import DueType
from obligations.models import InitialDebt, MonthlyDue, AssistanceCharge, StandingObligation
from obligations.utils import parse_period

User = get_user_model()

BALANCE_FIELDS = (
    "member",
    "amount_due",
    "amount_paid",
    "amount_remaining",
    "status",
    "description",
    "created_at",
    "updated_at",
    "reference",
    "id",
)


class ObligationSerializer(serializers.ModelSerializer):
    member = serializers.SlugRelatedField(
        slug_field="member_no", queryset=User.objects.all()
    )
    amount_due = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.01")
    )
    kind = serializers.SerializerMethodField()

    class Meta:
        read_only_fields = ("amount_paid", "amount_remaining", "status", "id")

    def get_kind(self, obj):
        return obj.KIND


class InitialDebtSerializer(ObligationSerializer):
    year = serializers.IntegerField(min_value=2000, max_value=2100)

    class Meta(ObligationSerializer.Meta):
        model = InitialDebt
        fields = BALANCE_FIELDS + ("kind", "year")

    def validate(self, attrs):
        if InitialDebt.objects.filter(member=attrs["member"], year=attrs["year"]).exists():
            raise serializers.ValidationError(
                {"year": f"An initial debt already exists for {attrs['year']}."}
            )
        return attrs


class MonthlyDueSerializer(ObligationSerializer):
    due_type = serializers.SlugRelatedField(slug_field="name", read_only=True)

    class Meta(ObligationSerializer.Meta):
        model = MonthlyDue
        fields = BALANCE_FIELDS + ("kind", "due_type", "period", "due_date")


class AssistanceChargeSerializer(ObligationSerializer):
    amount_due = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.01"), required=False
    )

    class Meta(ObligationSerializer.Meta):
        model = AssistanceCharge
        fields = BALANCE_FIELDS + ("kind", "assistance_type", "event_date")


class StandingObligationSerializer(ObligationSerializer):
    class Meta(ObligationSerializer.Meta):
        model = StandingObligation
        fields = BALANCE_FIELDS + ("kind", "label", "period", "due_date")


OBLIGATION_SERIALIZERS = {
    InitialDebt.KIND: InitialDebtSerializer,
    MonthlyDue.KIND: MonthlyDueSerializer,
    AssistanceCharge.KIND: AssistanceChargeSerializer,
    StandingObligation.KIND: StandingObligationSerializer,
}


def serialize_obligation(obligation):
    if obligation is None:
        return None
    return OBLIGATION_SERIALIZERS[obligation.KIND](obligation).data


class MonthlyDueGenerationSerializer(serializers.Serializer):
    period = serializers.CharField(max_length=7)
    months = serializers.IntegerField(min_value=1, max_value=12, default=1)
    due_types = serializers.SlugRelatedField(
        slug_field="name",
        queryset=DueType.objects.filter(is_active=True),
        many=True,
        required=False,
    )

    def validate_period(self, value):
        try:
            parse_period(value)
        except ValueError as e:
            raise serializers.ValidationError(str(e))
        return value
