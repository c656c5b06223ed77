from rest_framework import generics
from rest_framework.permissions import IsAuthenticated

from accounts.mixins import MemberScopedQuerysetMixin
from credits.models import Credit
from credits.serializers import CreditSerializer


class CreditListView(MemberScopedQuerysetMixin, generics.ListAPIView):
    queryset = Credit.objects.prefetch_related("usages")
    serializer_class = CreditSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        queryset = super().get_queryset()
        credit_status = self.request.query_params.get("status")
        if credit_status:
            queryset = queryset.filter(status=credit_status)
        return queryset


class CreditDetailView(MemberScopedQuerysetMixin, generics.RetrieveAPIView):
    queryset = Credit.objects.prefetch_related("usages")
    serializer_class = CreditSerializer
    permission_classes = [IsAuthenticated]
    lookup_field = "reference"
