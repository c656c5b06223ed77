from rest_framework import serializers

from credits.models import Credit, CreditUsage


class CreditUsageSerializer(serializers.ModelSerializer):
    credit = serializers.CharField(source="credit.reference", read_only=True)
    obligation_kind = serializers.CharField(read_only=True)
    obligation = serializers.SerializerMethodField()

    class Meta:
        model = CreditUsage
        fields = (
            "credit",
            "amount_consumed",
            "obligation_kind",
            "obligation",
            "description",
            "created_at",
            "reference",
        )

    def get_obligation(self, obj):
        obligation = obj.obligation
        return obligation.reference if obligation is not None else None


class CreditSerializer(serializers.ModelSerializer):
    member = serializers.CharField(source="member.member_no", read_only=True)
    payment = serializers.SerializerMethodField()
    usages = CreditUsageSerializer(many=True, read_only=True)

    class Meta:
        model = Credit
        fields = (
            "member",
            "payment",
            "amount",
            "amount_used",
            "amount_remaining",
            "status",
            "description",
            "usages",
            "created_at",
            "updated_at",
            "reference",
        )

    def get_payment(self, obj):
        return obj.payment.reference if obj.payment_id else None
