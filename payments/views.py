import logging
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.mixins import MemberScopedQuerysetMixin
from accounts.permissions import IsSystemAdmin
from payments.allocations import (
    edit_payment,
    get_financial_stats,
    get_member_balance,
    record_general_payment,
    record_payment,
)
from payments.exceptions import PaymentAuthorizationError
from payments.models import Payment
from payments.serializers import (
    GeneralPaymentSerializer,
    PaymentCreateSerializer,
    PaymentEditSerializer,
    PaymentSerializer,
)
from payments.utils import (
    send_general_payment_confirmation_email,
    send_payment_confirmation_email,
    upload_payment_proof,
)

logger = logging.getLogger(__name__)

User = get_user_model()


def envelope_response(result, success_status=status.HTTP_200_OK):
    if result["success"]:
        return Response(result, status=success_status)
    if result["error"] == PaymentAuthorizationError.default_message:
        return Response(result, status=status.HTTP_403_FORBIDDEN)
    return Response(result, status=status.HTTP_400_BAD_REQUEST)


def invalid_response(serializer):
    return Response(
        {
            "success": False,
            "error": "Invalid payment data",
            "data": {"errors": serializer.errors},
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


class ProofUploadMixin:
    """Push an uploaded proof file to storage and keep its URL."""

    def resolve_proof(self, data, member):
        proof = data.pop("proof", None)
        if proof is None:
            return data.get("proof_of_transfer")
        return upload_payment_proof(proof, member)

    def upload_failed(self, e):
        logger.error(f"Cloudinary upload failed: {str(e)}")
        return Response(
            {"success": False, "error": "Failed to upload proof of transfer"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


class PaymentListView(MemberScopedQuerysetMixin, generics.ListAPIView):
    queryset = Payment.objects.select_related("recorded_by")
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated]


class PaymentRecordView(ProofUploadMixin, APIView):
    permission_classes = [IsSystemAdmin]
    serializer_class = PaymentCreateSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.serializer_class(data=request.data)
        if not serializer.is_valid():
            return invalid_response(serializer)
        data = dict(serializer.validated_data)
        member = data.pop("member")

        try:
            data["proof_of_transfer"] = self.resolve_proof(data, member)
        except Exception as e:
            return self.upload_failed(e)

        result = record_payment(request.user, member, **data)
        if result["success"]:
            send_payment_confirmation_email(member, result["data"]["payment"])
        return envelope_response(result, status.HTTP_201_CREATED)


class GeneralPaymentRecordView(ProofUploadMixin, APIView):
    permission_classes = [IsSystemAdmin]
    serializer_class = GeneralPaymentSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.serializer_class(data=request.data)
        if not serializer.is_valid():
            return invalid_response(serializer)
        data = dict(serializer.validated_data)
        member = data.pop("member")

        try:
            data["proof_of_transfer"] = self.resolve_proof(data, member)
        except Exception as e:
            return self.upload_failed(e)

        result = record_general_payment(request.user, member, **data)
        if result["success"]:
            send_general_payment_confirmation_email(
                member, data["amount"], result["data"]["payments"], result["data"]["credit"]
            )
        return envelope_response(result, status.HTTP_201_CREATED)


class PaymentDetailView(ProofUploadMixin, APIView):
    """GET a payment; PATCH edits it and rebalances its obligation and credit."""

    permission_classes = [IsAuthenticated]

    def get_payment(self, reference):
        payment = get_object_or_404(
            Payment.objects.select_related("member", "recorded_by"), reference=reference
        )
        user = self.request.user
        if not (user.is_superuser or user.is_system_admin or payment.member_id == user.pk):
            return None
        return payment

    def get(self, request, reference, *args, **kwargs):
        payment = self.get_payment(reference)
        if payment is None:
            return Response(
                {"success": False, "error": PaymentAuthorizationError.default_message},
                status=status.HTTP_403_FORBIDDEN,
            )
        return Response(PaymentSerializer(payment).data)

    def patch(self, request, reference, *args, **kwargs):
        payment = get_object_or_404(Payment.objects.select_related("member"), reference=reference)
        serializer = PaymentEditSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_response(serializer)
        data = dict(serializer.validated_data)

        try:
            proof = self.resolve_proof(data, payment.member)
        except Exception as e:
            return self.upload_failed(e)

        result = edit_payment(
            request.user,
            payment,
            amount=data.get("amount", payment.amount),
            payment_method=data.get("payment_method", payment.payment_method),
            payment_date=data.get("payment_date"),
            payment_reference=data.get("payment_reference"),
            proof_of_transfer=proof,
            description=data.get("description"),
        )
        return envelope_response(result)


class MemberBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, member_no, *args, **kwargs):
        member = get_object_or_404(User, member_no=member_no)
        return envelope_response(get_member_balance(request.user, member))


class FinancialStatsView(APIView):
    permission_classes = [IsSystemAdmin]

    def get(self, request, *args, **kwargs):
        return envelope_response(get_financial_stats(request.user))
