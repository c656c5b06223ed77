import logging
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated

from accounts.mixins import MemberScopedQuerysetMixin
from accounts.permissions import IsSystemAdmin, IsSystemAdminOrReadOnly
from obligations.models import InitialDebt, MonthlyDue, AssistanceCharge, StandingObligation
from obligations.serializers import (
    InitialDebtSerializer,
    MonthlyDueSerializer,
    AssistanceChargeSerializer,
    StandingObligationSerializer,
    MonthlyDueGenerationSerializer,
)
from obligations.utils import assistance_amount_for, generate_monthly_dues

logger = logging.getLogger(__name__)


class InitialDebtListCreateView(MemberScopedQuerysetMixin, generics.ListCreateAPIView):
    queryset = InitialDebt.objects.all()
    serializer_class = InitialDebtSerializer
    permission_classes = [IsSystemAdminOrReadOnly]

    def perform_create(self, serializer):
        debt = serializer.save(created_by=self.request.user)
        logger.info(f"Initial debt {debt.reference} of {debt.amount_due} created for {debt.member.member_no}")


class MonthlyDueListView(MemberScopedQuerysetMixin, generics.ListAPIView):
    queryset = MonthlyDue.objects.select_related("due_type")
    serializer_class = MonthlyDueSerializer
    permission_classes = [IsAuthenticated]


class MonthlyDueGenerateView(APIView):
    permission_classes = [IsSystemAdmin]
    serializer_class = MonthlyDueGenerationSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        due_types = serializer.validated_data.get("due_types") or None

        created = generate_monthly_dues(
            serializer.validated_data["period"],
            months=serializer.validated_data["months"],
            due_types=due_types,
            created_by=request.user,
        )
        return Response(
            {
                "success": True,
                "message": f"{len(created)} monthly due(s) created",
                "data": {"created_count": len(created)},
            },
            status=status.HTTP_201_CREATED,
        )


class AssistanceChargeListCreateView(MemberScopedQuerysetMixin, generics.ListCreateAPIView):
    queryset = AssistanceCharge.objects.all()
    serializer_class = AssistanceChargeSerializer
    permission_classes = [IsSystemAdminOrReadOnly]

    def perform_create(self, serializer):
        amount = serializer.validated_data.get("amount_due")
        if amount is None:
            amount = assistance_amount_for(serializer.validated_data.get("assistance_type", "Other"))
        charge = serializer.save(created_by=self.request.user, amount_due=amount)
        logger.info(f"Assistance charge {charge.reference} of {charge.amount_due} created for {charge.member.member_no}")


class StandingObligationListCreateView(MemberScopedQuerysetMixin, generics.ListCreateAPIView):
    queryset = StandingObligation.objects.all()
    serializer_class = StandingObligationSerializer
    permission_classes = [IsSystemAdminOrReadOnly]

    def perform_create(self, serializer):
        obligation = serializer.save(created_by=self.request.user)
        logger.info(f"Standing obligation {obligation.reference} created for {obligation.member.member_no}")
