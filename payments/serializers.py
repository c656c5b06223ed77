from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework import serializers

from credits.models import Credit
from credits.serializers import CreditSerializer
from obligations.models import OBLIGATION_KINDS
from obligations.serializers import serialize_obligation
from payments.models import Payment

User = get_user_model()


class PaymentSerializer(serializers.ModelSerializer):
    member = serializers.CharField(source="member.member_no", read_only=True)
    recorded_by = serializers.SerializerMethodField()
    obligation_kind = serializers.CharField(read_only=True)
    obligation = serializers.SerializerMethodField()
    credit = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = (
            "member",
            "amount",
            "payment_date",
            "payment_method",
            "payment_reference",
            "proof_of_transfer",
            "description",
            "obligation_kind",
            "obligation",
            "credit",
            "recorded_by",
            "identity",
            "created_at",
            "updated_at",
            "reference",
        )

    def get_recorded_by(self, obj):
        return obj.recorded_by.member_no if obj.recorded_by_id else None

    def get_obligation(self, obj):
        obligation = obj.obligation
        return serialize_obligation(obligation) if obligation is not None else None

    def get_credit(self, obj):
        credit = Credit.objects.filter(payment=obj).first()
        return CreditSerializer(credit).data if credit is not None else None


class PaymentTenderSerializer(serializers.Serializer):
    """Fields shared by every way of recording a payment."""

    member = serializers.SlugRelatedField(slug_field="member_no", queryset=User.objects.all())
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    payment_method = serializers.ChoiceField(choices=Payment.PAYMENT_METHOD_CHOICES)
    payment_date = serializers.DateField(required=False)
    payment_reference = serializers.CharField(max_length=100, required=False, allow_blank=True)
    proof_of_transfer = serializers.URLField(max_length=500, required=False, allow_blank=True)
    proof = serializers.FileField(required=False, write_only=True)
    description = serializers.CharField(required=False, allow_blank=True)


class PaymentCreateSerializer(PaymentTenderSerializer):
    obligation_kind = serializers.ChoiceField(choices=OBLIGATION_KINDS, required=False)
    obligation_id = serializers.UUIDField(required=False)

    def validate(self, attrs):
        if bool(attrs.get("obligation_kind")) != bool(attrs.get("obligation_id")):
            raise serializers.ValidationError(
                "obligation_kind and obligation_id must be provided together."
            )
        return attrs


class GeneralPaymentSerializer(PaymentTenderSerializer):
    pass


class PaymentEditSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"), required=False)
    payment_method = serializers.ChoiceField(choices=Payment.PAYMENT_METHOD_CHOICES, required=False)
    payment_date = serializers.DateField(required=False)
    payment_reference = serializers.CharField(max_length=100, required=False, allow_blank=True)
    proof_of_transfer = serializers.URLField(max_length=500, required=False, allow_blank=True)
    proof = serializers.FileField(required=False, write_only=True)
    description = serializers.CharField(required=False, allow_blank=True)
